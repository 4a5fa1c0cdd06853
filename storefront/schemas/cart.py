import math
import uuid
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductSnapshot(SQLModel):
    """
    Parent product fields copied into every cart line.
    """

    id: uuid.UUID
    product_name: str
    product_img_url: str | None = None


class VariationSnapshot(SQLModel):
    """
    Denormalized view of the variation a cart line points at.

    `available_stock` is the stock level when the snapshot was read; the
    client clamps quantities against it before dispatching updates.
    """

    id: uuid.UUID
    name: str
    price: float
    available_stock: int = Field(ge=0)
    image_url: str | None = None
    product: ProductSnapshot

    @field_validator("price")
    @classmethod
    def finite_price(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            raise ValueError("price must be a finite, non-negative number")
        return v


class CartLineItem(SQLModel):
    """
    One cart entry with its variation snapshot.

    Shared by the API responses and the client-side cart store. A
    quantity of 0 only ever exists transiently on the client.
    """

    id: uuid.UUID
    variation_id: uuid.UUID
    quantity: int = Field(ge=0)
    variation: VariationSnapshot


class CartItemCreate(SQLModel):
    """
    Payload for adding a variation to the cart.
    """

    model_config = ConfigDict(extra="forbid")

    variation_id: uuid.UUID
    quantity: int = Field(gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for setting the absolute quantity of a cart line.

    0 removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=0)


class CartCountRead(SQLModel):
    success: bool = True
    cart_item_count: int


class CartItemsRead(SQLModel):
    success: bool = True
    items: list[CartLineItem]


class CartMutationRead(SQLModel):
    """
    Result of add/update: a message for the user plus the new item count.
    """

    success: bool = True
    message: str
    cart_item_count: int | None = None


class CartClearRead(SQLModel):
    success: bool = True
    message: str


class LineTotalsRead(SQLModel):
    line_item_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    discounted_unit_price: Decimal
    line_total: Decimal
    discounted_line_total: Decimal


class CartTotalsRead(SQLModel):
    """
    Tier-priced totals for the current cart.
    """

    tier: str
    discount_fraction: Decimal
    lines: list[LineTotalsRead]
    item_count: int
    subtotal: Decimal
    discount_amount: Decimal
    discounted_subtotal: Decimal
