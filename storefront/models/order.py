import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order created from the cart at checkout.

    Amounts are frozen at checkout time together with the tier that was
    used to price them, so a later tier change never rewrites history.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # Contact details
    first_name: str
    last_name: str
    email: str
    phone: str

    # Shipping details
    street_address: str
    apartment_suite: str | None = None
    town_city: str
    province: str
    postcode: str
    country_region: str = Field(max_length=2)

    # delivery | collection
    method_of_collection: str = Field(default="delivery")

    order_notes: str | None = Field(
        default=None,
        description="Optional note / special instructions",
    )

    # pending | processing | shipped | delivered | cancelled | refunded
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    tier: str = Field(
        default="BRONZE",
        description="Membership tier used to price this order",
    )

    subtotal: float = Field(description="Sum of list-price line totals")
    discount_amount: float = Field(description="Member discount applied")
    total_amount: float = Field(description="Amount charged (after discount)")

    amount_minor: int = Field(
        description="total_amount in minor currency units (cents)",
    )
    currency: str = Field(default="usd", max_length=3)

    payment_reference: str | None = Field(
        default=None,
        index=True,
        description="Identifier assigned by the payment provider, if any",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    variation_id: uuid.UUID = Field(
        foreign_key="variations.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="List price at time of order",
    )

    discounted_unit_price: float = Field(
        description="Unit price after the member discount, rounded to cents",
    )

    line_total: float = Field(
        description="Discounted line total, rounded to cents",
    )

    product_name: str | None = None
    variation_name: str | None = None
