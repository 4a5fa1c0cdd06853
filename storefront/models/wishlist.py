import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class WishlistItem(SQLModel, table=True):
    """A variation a user has saved for later."""

    __tablename__ = "wishlist_items"
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

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
