import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.core.auth import require_admin, require_user
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.tier_application_repo import TierApplicationRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.tier_application import (
    ApplicationStatus,
    TierApplicationCreate,
    TierApplicationRead,
    TierStatusRead,
)
from storefront.services.tier_application_service import TierApplicationService

router = APIRouter(tags=["Tier applications"])

service = TierApplicationService(TierApplicationRepository(), UserRepository())


# -------- Customers --------


@router.post(
    "/users/me/tier-application",
    response_model=TierApplicationRead,
    status_code=status.HTTP_201_CREATED,
)
def apply_for_tier(
    payload: TierApplicationCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Apply for another membership tier.

    - 400 when it is the current tier
    - 409 while another application is pending
    """
    return service.submit(session, current_user, payload)


@router.get("/users/me/tier-application", response_model=TierStatusRead)
def my_tier_status(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    return service.get_status(session, current_user)


# -------- Admins --------


@router.get(
    "/tier-applications",
    response_model=list[TierApplicationRead],
    dependencies=[Depends(require_admin)],
)
def list_tier_applications(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
):
    return service.list_applications(session, skip, limit, status_filter)


@router.post(
    "/tier-applications/{application_id}/approve",
    response_model=TierApplicationRead,
    dependencies=[Depends(require_admin)],
)
def approve_tier_application(
    application_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Approve a pending application; the customer moves to the requested tier.
    """
    return service.approve(session, application_id)


@router.post(
    "/tier-applications/{application_id}/reject",
    response_model=TierApplicationRead,
    dependencies=[Depends(require_admin)],
)
def reject_tier_application(
    application_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.reject(session, application_id)
