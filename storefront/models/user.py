import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile for the storefront.

    Identity:
      - id: MUST match the auth provider's user id (UUID from JWT "sub")

    Role:
      - "user" | "admin"
      - "guest" is represented by the absence of a row / missing token.

    Tier:
      - BRONZE | SILVER | GOLD | PLATINUM, drives the member discount.

    This table is *not* responsible for password hashes. The auth provider
    stores credentials in its own schema.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches the auth provider's user id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the auth provider",
    )

    name: str = Field(
        max_length=50,
        description="Customer display name; first part of email by default",
    )

    # Application role (not a database role)
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    tier: str = Field(
        default="BRONZE",
        index=True,
        description="Membership tier: BRONZE | SILVER | GOLD | PLATINUM",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
