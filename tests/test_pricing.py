"""
Unit Tests: membership tier pricing

Covers services/pricing.py:
- normalize_tier() / discount_fraction() - tier labels and fallbacks
- unit_price() - exact discounted prices, invalid input passthrough
- format_price() / round_money() - display rounding
- tier_pricing() / pricing_function() - bound pricing helpers
"""

import math
from decimal import Decimal

import pytest

from storefront.services.pricing import (
    Tier,
    discount_fraction,
    format_price,
    normalize_tier,
    pricing_function,
    round_money,
    tier_pricing,
    unit_price,
)


class TestTierLabels:

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("SILVER", Tier.SILVER),
            ("silver", Tier.SILVER),
            ("  Gold ", Tier.GOLD),
            (Tier.PLATINUM, Tier.PLATINUM),
            ("DIAMOND", Tier.BRONZE),
            ("", Tier.BRONZE),
            (None, Tier.BRONZE),
        ],
    )
    def test_normalize_tier(self, label, expected):
        assert normalize_tier(label) is expected

    @pytest.mark.parametrize(
        "tier, fraction",
        [
            ("BRONZE", Decimal("0")),
            ("SILVER", Decimal("0.05")),
            ("GOLD", Decimal("0.10")),
            ("PLATINUM", Decimal("0.15")),
        ],
    )
    def test_discount_fraction_per_tier(self, tier, fraction):
        assert discount_fraction(tier) == fraction

    def test_missing_tier_has_no_discount(self):
        assert discount_fraction(None) == 0
        assert discount_fraction("unknown") == 0


class TestUnitPrice:

    def test_gold_takes_ten_percent_off(self):
        assert unit_price(100, Tier.GOLD) == Decimal("90")

    def test_float_prices_keep_their_decimal_value(self):
        # 19.99 * 0.95, no binary noise
        assert unit_price(19.99, "SILVER") == Decimal("18.9905")

    def test_baseline_tier_returns_original_value(self):
        assert unit_price(Decimal("42.50"), None) == Decimal("42.50")

    def test_invalid_prices_pass_through_unchanged(self, caplog):
        assert unit_price("abc", "GOLD") == "abc"
        assert unit_price(-5, "GOLD") == -5
        assert math.isnan(unit_price(float("nan"), "GOLD"))
        assert "Invalid price" in caplog.text

    def test_result_never_exceeds_original(self):
        for tier in Tier:
            assert unit_price(80, tier) <= 80


class TestDisplay:

    def test_round_money_rounds_half_up(self):
        assert round_money(Decimal("0.045")) == Decimal("0.05")
        assert round_money(Decimal("2.675")) == Decimal("2.68")

    def test_format_price(self):
        assert format_price(Decimal("1234.5")) == "$1,234.50"
        assert format_price(9.999, currency_symbol="€") == "€10.00"

    def test_format_price_renders_invalid_amounts_as_is(self):
        assert format_price("n/a") == "n/a"


class TestBoundPricing:

    def test_tier_pricing(self):
        gold = tier_pricing("gold")
        assert gold.tier is Tier.GOLD
        assert gold.has_discount
        assert gold.price(200) == Decimal("180")

    def test_bronze_has_no_discount(self):
        assert not tier_pricing("BRONZE").has_discount

    def test_pricing_function(self):
        price = pricing_function("PLATINUM")
        assert price(200) == Decimal("170")
