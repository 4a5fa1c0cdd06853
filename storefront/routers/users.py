import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_auth, require_admin
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    MembershipRead,
    UserRead,
    UserRoleUpdate,
    UserTierUpdate,
    UserUpdate,
)
from storefront.services.pricing import Tier
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.
    """
    return service.get_me(current_user)


@router.get("/me/membership", response_model=MembershipRead)
def read_my_membership(current_user: User = Depends(require_auth)):
    """
    Current membership tier and its discount.
    """
    return service.get_membership(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's profile (partial update).

    Currently, only `name` is editable.
    """
    return service.update_me(session, current_user, payload)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    tier: Tier | None = None,
):
    """
    List users (admin only), optionally filtered by tier.
    """
    return service.list_users(session, skip, limit, tier.value if tier else None)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_user(session, user_id)


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only).

    Allowed roles: user, admin.
    """
    return service.update_role(session, user_id, payload)


@router.patch(
    "/{user_id}/tier",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_tier(
    user_id: uuid.UUID,
    payload: UserTierUpdate,
    session: Session = Depends(get_session),
):
    """
    Move a member to another tier (admin only).
    """
    return service.update_tier(session, user_id, payload)
