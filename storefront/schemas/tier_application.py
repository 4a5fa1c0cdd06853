import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

from storefront.services.pricing import Tier

ApplicationStatus = Literal["pending", "approved", "rejected"]


class TierApplicationCreate(SQLModel):
    """Customer payload: the tier being applied for."""

    model_config = ConfigDict(extra="forbid")
    tier: Tier


class TierApplicationRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    tier: Tier
    status: ApplicationStatus
    created_at: datetime
    reviewed_at: datetime | None = None


class TierStatusRead(SQLModel):
    """
    The caller's current tier and their most recent application, if any.
    """

    current_tier: Tier
    latest_application: TierApplicationRead | None = None
