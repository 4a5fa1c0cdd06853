import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class TierApplication(SQLModel, table=True):
    """
    A customer's request to move to another membership tier.

    Approval by an admin is what changes `User.tier`; the application keeps
    the requested tier and the review outcome.
    """

    __tablename__ = "tier_applications"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    tier: str = Field(description="Requested tier: BRONZE | SILVER | GOLD | PLATINUM")

    # pending | approved | rejected
    status: str = Field(default="pending", index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    reviewed_at: datetime | None = None
