import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.tier_application import TierApplication
from storefront.models.user import User
from storefront.repositories.tier_application_repo import TierApplicationRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.tier_application import (
    TierApplicationCreate,
    TierApplicationRead,
    TierStatusRead,
)
from storefront.services.pricing import normalize_tier

logger = logging.getLogger(__name__)


class TierApplicationService:
    """
    Membership upgrade requests.

    Rules:
      - customers apply for a tier other than their current one
      - at most one pending application per customer
      - only pending applications can be reviewed; approval moves the
        customer to the requested tier in the same commit
    """

    def __init__(self, repo: TierApplicationRepository, user_repo: UserRepository):
        self.repo = repo
        self.user_repo = user_repo

    def _get_pending(self, session: Session, application_id: uuid.UUID) -> TierApplication:
        application = self.repo.get_by_id(session, application_id)
        if not application:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Tier application not found",
            )
        if application.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Tier application already {application.status}",
            )
        return application

    # ----- Customers -----

    def submit(
        self,
        session: Session,
        user: User,
        payload: TierApplicationCreate,
    ) -> TierApplication:
        if normalize_tier(user.tier) == payload.tier:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"You are already a {payload.tier.value} member",
            )
        if self.repo.get_pending_for_user(session, user.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You already have a pending tier application",
            )

        application = self.repo.save(
            session,
            TierApplication(user_id=user.id, tier=payload.tier.value),
        )
        session.commit()
        session.refresh(application)
        logger.info("tier application user=%s tier=%s", user.id, application.tier)
        return application

    def get_status(self, session: Session, user: User) -> TierStatusRead:
        latest = self.repo.get_latest_for_user(session, user.id)
        return TierStatusRead(
            current_tier=normalize_tier(user.tier),
            latest_application=(
                TierApplicationRead.model_validate(latest, from_attributes=True)
                if latest
                else None
            ),
        )

    # ----- Admins -----

    def list_applications(
        self,
        session: Session,
        skip: int,
        limit: int,
        status_filter: str | None = None,
    ) -> list[TierApplication]:
        return self.repo.list_applications(session, skip, limit, status_filter)

    def approve(self, session: Session, application_id: uuid.UUID) -> TierApplication:
        application = self._get_pending(session, application_id)
        user = self.user_repo.get_by_id(session, application.user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )

        logger.info(
            "tier application %s approved: user=%s %s -> %s",
            application.id, user.id, user.tier, application.tier,
        )
        user.tier = application.tier
        application.status = "approved"
        application.reviewed_at = datetime.now(timezone.utc)
        session.add(user)
        self.repo.save(session, application)
        session.commit()
        session.refresh(application)
        return application

    def reject(self, session: Session, application_id: uuid.UUID) -> TierApplication:
        application = self._get_pending(session, application_id)
        application.status = "rejected"
        application.reviewed_at = datetime.now(timezone.utc)
        self.repo.save(session, application)
        session.commit()
        session.refresh(application)
        logger.info("tier application %s rejected", application.id)
        return application
