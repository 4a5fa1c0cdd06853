import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class CartItem(SQLModel, table=True):
    """
    Shopping cart line for a user.
    One user cannot have 2 rows for the same variation, and a row never
    holds a zero quantity (setting 0 deletes it).
    """

    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("user_id", "variation_id"),)

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    variation_id: uuid.UUID = Field(
        foreign_key="variations.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Must be >= 1",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
