"""
Unit Tests: order totals

Covers services/totals.py compute_order_totals():
- tier discount applied per line at full precision
- subtotal / discounted subtotal rounded once
- empty carts and unknown tiers
- corrupted prices
"""

import uuid
from decimal import Decimal

import pytest

from storefront.schemas.cart import CartLineItem, VariationSnapshot
from storefront.services.pricing import Tier
from storefront.services.totals import InvalidPriceError, compute_order_totals
from tests.fakes import PRODUCT, make_line


class TestComputeOrderTotals:

    def test_silver_member_two_lines(self):
        items = [make_line(100, 2), make_line(50, 1)]

        totals = compute_order_totals(items, "SILVER")

        assert totals.tier is Tier.SILVER
        assert totals.subtotal == Decimal("250.00")
        assert totals.discount_amount == Decimal("12.50")
        assert totals.discounted_subtotal == Decimal("237.50")
        assert totals.item_count == 3
        assert totals.amount_minor == 23750

    def test_line_details(self):
        item = make_line(19.99, 3)

        totals = compute_order_totals([item], Tier.SILVER)
        (line,) = totals.lines

        assert line.line_item_id == item.id
        assert line.unit_price == Decimal("19.99")
        assert line.discounted_unit_price == Decimal("18.9905")
        assert line.line_total == Decimal("59.97")
        assert line.discounted_line_total == Decimal("56.9715")
        assert totals.discounted_subtotal == Decimal("56.97")

    def test_rounds_once_after_summing(self):
        # Rounding each line first would give 0.06
        items = [make_line(0.015, 1) for _ in range(3)]

        totals = compute_order_totals(items, None)

        assert totals.subtotal == Decimal("0.05")

    def test_discount_is_difference_of_rounded_totals(self):
        items = [make_line(33.33, 1), make_line(0.07, 3)]

        totals = compute_order_totals(items, "PLATINUM")

        assert totals.discount_amount == totals.subtotal - totals.discounted_subtotal

    def test_empty_cart(self):
        totals = compute_order_totals([], "GOLD")

        assert totals.lines == ()
        assert totals.item_count == 0
        assert totals.subtotal == Decimal("0.00")
        assert totals.discounted_subtotal == Decimal("0.00")
        assert totals.amount_minor == 0

    def test_unknown_tier_pays_list_price(self):
        totals = compute_order_totals([make_line(100, 1)], "VIP")

        assert totals.tier is Tier.BRONZE
        assert totals.discounted_subtotal == totals.subtotal == Decimal("100.00")

    def test_corrupted_price_raises(self):
        variation = VariationSnapshot.model_construct(
            id=uuid.uuid4(),
            name="Broken",
            price=float("inf"),
            available_stock=1,
            image_url=None,
            product=PRODUCT,
        )
        item = CartLineItem.model_construct(
            id=uuid.uuid4(),
            variation_id=variation.id,
            quantity=1,
            variation=variation,
        )

        with pytest.raises(InvalidPriceError):
            compute_order_totals([item], "GOLD")

    def test_to_read(self):
        totals = compute_order_totals([make_line(100, 2), make_line(50, 1)], "SILVER")

        read = totals.to_read()

        assert read.tier == "SILVER"
        assert read.discount_fraction == Decimal("0.05")
        assert read.discounted_subtotal == Decimal("237.50")
        assert len(read.lines) == 2


class TestSnapshotValidation:

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), -1.0])
    def test_snapshot_rejects_unusable_prices(self, price):
        with pytest.raises(ValueError):
            VariationSnapshot(
                id=uuid.uuid4(),
                name="Bad",
                price=price,
                available_stock=1,
                product=PRODUCT,
            )
