import uuid

from sqlmodel import Session, select

from storefront.models.tier_application import TierApplication


class TierApplicationRepository:
    """Data access for membership tier applications. Callers commit."""

    def get_by_id(
        self, session: Session, application_id: uuid.UUID
    ) -> TierApplication | None:
        return session.get(TierApplication, application_id)

    def get_pending_for_user(
        self, session: Session, user_id: uuid.UUID
    ) -> TierApplication | None:
        stmt = select(TierApplication).where(
            TierApplication.user_id == user_id,
            TierApplication.status == "pending",
        )
        return session.exec(stmt).first()

    def get_latest_for_user(
        self, session: Session, user_id: uuid.UUID
    ) -> TierApplication | None:
        stmt = (
            select(TierApplication)
            .where(TierApplication.user_id == user_id)
            .order_by(TierApplication.created_at.desc())
        )
        return session.exec(stmt).first()

    def list_applications(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[TierApplication]:
        stmt = select(TierApplication)
        if status:
            stmt = stmt.where(TierApplication.status == status)
        stmt = stmt.order_by(TierApplication.created_at).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def save(self, session: Session, application: TierApplication) -> TierApplication:
        session.add(application)
        session.flush()
        session.refresh(application)
        return application
