import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from storefront.schemas.cart import CartTotalsRead

CollectionMethod = Literal["delivery", "collection"]
OrderStatus = Literal[
    "pending", "processing", "shipped", "delivered", "cancelled", "refunded"
]


class OrderCreate(SQLModel):
    """
    Checkout details for turning the current cart into an order.

    Backend derives:
      - user_id and tier from the token
      - status = 'pending'
      - subtotal / discount / total from the cart and tier
      - items from the cart
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    email: str = Field(max_length=255)
    phone: str = Field(max_length=30)
    street_address: str
    apartment_suite: str | None = None
    town_city: str
    province: str
    postcode: str = Field(max_length=12)
    country_region: str = Field(min_length=2, max_length=2)
    method_of_collection: CollectionMethod = "delivery"
    order_notes: str | None = Field(default=None, max_length=490)

    @field_validator(
        "first_name",
        "last_name",
        "phone",
        "street_address",
        "town_city",
        "province",
        "postcode",
    )
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def looks_like_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("invalid email address")
        return v

    @field_validator("country_region")
    @classmethod
    def upper_country(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("apartment_suite", "order_notes")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class CheckoutSummaryRead(SQLModel):
    """
    What checkout will charge for the current cart.
    """

    totals: CartTotalsRead
    amount_minor: int
    currency: str


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    street_address: str
    apartment_suite: str | None
    town_city: str
    province: str
    postcode: str
    country_region: str
    method_of_collection: CollectionMethod
    order_notes: str | None
    status: OrderStatus
    tier: str
    subtotal: float
    discount_amount: float
    total_amount: float
    amount_minor: int
    currency: str
    created_at: datetime


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    variation_id: uuid.UUID
    product_name: str | None
    variation_name: str | None
    quantity: int
    unit_price: float
    discounted_unit_price: float
    line_total: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
