import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from storefront.services.pricing import Tier

# App-level roles. "guest" = no token, so we don't store it here.
Role = Literal["user", "admin"]


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    name: str
    role: Role
    tier: Tier
    created_at: datetime


class MembershipRead(SQLModel):
    """
    The caller's tier and what it is worth.
    """

    tier: Tier
    discount_fraction: Decimal
    has_discount: bool


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Only editable field is `name` here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class UserTierUpdate(SQLModel):
    """
    Admin-only membership tier change.
    """

    model_config = ConfigDict(extra="forbid")
    tier: Tier
