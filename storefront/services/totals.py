"""
Order totals for a cart under a membership tier.

The same function prices the cart drawer, the checkout summary and the
order written at checkout, so every surface agrees to the cent:

  - per-line prices are kept at full precision,
  - line totals are summed at full precision,
  - the sums are rounded once (half-up, 2 dp).

Nothing here is cached; callers recompute from the current cart and tier.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from storefront.schemas.cart import CartLineItem, CartTotalsRead, LineTotalsRead
from storefront.services.pricing import (
    Tier,
    discount_fraction,
    normalize_tier,
    round_money,
    to_decimal,
    unit_price,
)


class InvalidPriceError(ValueError):
    pass


@dataclass(frozen=True)
class LineTotals:
    line_item_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    discounted_unit_price: Decimal
    line_total: Decimal
    discounted_line_total: Decimal


@dataclass(frozen=True)
class OrderTotals:
    tier: Tier
    discount_fraction: Decimal
    lines: tuple[LineTotals, ...]
    item_count: int
    subtotal: Decimal
    discounted_subtotal: Decimal
    discount_amount: Decimal

    @property
    def amount_minor(self) -> int:
        """Discounted subtotal in cents, as payment providers expect it."""
        return int(self.discounted_subtotal * 100)

    def to_read(self) -> CartTotalsRead:
        return CartTotalsRead(
            tier=self.tier.value,
            discount_fraction=self.discount_fraction,
            lines=[
                LineTotalsRead(
                    line_item_id=line.line_item_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    discounted_unit_price=line.discounted_unit_price,
                    line_total=line.line_total,
                    discounted_line_total=line.discounted_line_total,
                )
                for line in self.lines
            ],
            item_count=self.item_count,
            subtotal=self.subtotal,
            discount_amount=self.discount_amount,
            discounted_subtotal=self.discounted_subtotal,
        )


def compute_order_totals(
    items: Iterable[CartLineItem],
    tier: Tier | str | None,
) -> OrderTotals:
    """
    Price every cart line for `tier` and total them.

    Raises:
        InvalidPriceError: if a line's price is not a finite, non-negative
            number. Snapshots are validated on the way in, so this only
            fires on corrupted data.
    """
    resolved = normalize_tier(tier)

    lines: list[LineTotals] = []
    raw_subtotal = Decimal("0")
    raw_discounted = Decimal("0")
    item_count = 0

    for item in items:
        price = to_decimal(item.variation.price)
        if price is None:
            raise InvalidPriceError(
                f"Invalid price for variation {item.variation_id}: "
                f"{item.variation.price!r}"
            )

        discounted = unit_price(price, resolved)
        line_total = price * item.quantity
        discounted_line_total = discounted * item.quantity

        raw_subtotal += line_total
        raw_discounted += discounted_line_total
        item_count += item.quantity

        lines.append(
            LineTotals(
                line_item_id=item.id,
                quantity=item.quantity,
                unit_price=price,
                discounted_unit_price=discounted,
                line_total=line_total,
                discounted_line_total=discounted_line_total,
            )
        )

    subtotal = round_money(raw_subtotal)
    discounted_subtotal = round_money(raw_discounted)

    return OrderTotals(
        tier=resolved,
        discount_fraction=discount_fraction(resolved),
        lines=tuple(lines),
        item_count=item_count,
        subtotal=subtotal,
        discounted_subtotal=discounted_subtotal,
        discount_amount=subtotal - discounted_subtotal,
    )
