"""
Membership tier discounts.

Every tier grants a fixed fraction off listed variation prices:

    BRONZE    0%   (baseline, also used for guests and unknown labels)
    SILVER    5%
    GOLD     10%
    PLATINUM 15%

All arithmetic here is exact (Decimal). Rounding to currency precision is
the caller's job and happens once, at display/total time.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class Tier(str, Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


BASELINE_TIER = Tier.BRONZE

TIER_DISCOUNTS: dict[Tier, Decimal] = {
    Tier.BRONZE: Decimal("0"),
    Tier.SILVER: Decimal("0.05"),
    Tier.GOLD: Decimal("0.10"),
    Tier.PLATINUM: Decimal("0.15"),
}


def normalize_tier(tier: Tier | str | None) -> Tier:
    """
    Map any tier label to a known Tier.

    Labels are case-insensitive; None, blanks and unknown labels fall back
    to the baseline tier instead of raising.
    """
    if isinstance(tier, Tier):
        return tier
    if not tier or not isinstance(tier, str):
        return BASELINE_TIER
    try:
        return Tier(tier.strip().upper())
    except ValueError:
        return BASELINE_TIER


def discount_fraction(tier: Tier | str | None) -> Decimal:
    """Discount fraction in [0, 1) for the given tier label."""
    return TIER_DISCOUNTS[normalize_tier(tier)]


def to_decimal(value) -> Decimal | None:
    """
    Convert a price-like value into a finite, non-negative Decimal.

    Floats go through `str()` so 19.99 stays 19.99 instead of its binary
    expansion. Returns None when the value cannot be used as a price.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite() or number < 0:
        return None
    return number


def unit_price(original_price, tier: Tier | str | None):
    """
    Discounted unit price: original_price * (1 - discount_fraction(tier)).

    This sits in rendering paths, so a price that is not a finite,
    non-negative number is returned unchanged and a warning is logged.
    """
    price = to_decimal(original_price)
    if price is None:
        logger.warning("Invalid price passed to unit_price: %r", original_price)
        return original_price
    return price * (1 - discount_fraction(tier))


def round_money(amount: Decimal) -> Decimal:
    """Round half-up to cents. Only call this on final, displayed amounts."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_price(amount, currency_symbol: str = "$") -> str:
    """Display helper: '$1,234.50'. Invalid amounts are rendered as-is."""
    number = to_decimal(amount)
    if number is None:
        return str(amount)
    return f"{currency_symbol}{round_money(number):,.2f}"


@dataclass(frozen=True)
class TierPricing:
    """Pricing bound to one tier, for surfaces that show many prices."""

    tier: Tier
    fraction: Decimal

    @property
    def has_discount(self) -> bool:
        return self.fraction > 0

    def price(self, original_price):
        return unit_price(original_price, self.tier)


def tier_pricing(tier: Tier | str | None) -> TierPricing:
    resolved = normalize_tier(tier)
    return TierPricing(tier=resolved, fraction=TIER_DISCOUNTS[resolved])


def pricing_function(tier: Tier | str | None) -> Callable:
    """Shortcut returning just the bound `price(original)` callable."""
    return tier_pricing(tier).price
