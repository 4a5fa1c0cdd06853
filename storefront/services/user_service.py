import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    MembershipRead,
    UserRoleUpdate,
    UserTierUpdate,
    UserUpdate,
)
from storefront.services.pricing import tier_pricing

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - enforce app rules (no email change, role constraints)
      - membership tier lookups and admin tier changes
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def get_membership(self, current_user: User) -> MembershipRead:
        """
        Tier of the current user with its discount; unknown stored labels
        read as the baseline tier.
        """
        pricing = tier_pricing(current_user.tier)
        return MembershipRead(
            tier=pricing.tier,
            discount_fraction=pricing.fraction,
            has_discount=pricing.has_discount,
        )

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `name` is editable.
        """
        if payload.name is not None:
            current_user.name = payload.name

        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int,
        limit: int,
        tier: str | None = None,
    ) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list_users(session, skip=skip, limit=limit, tier=tier)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            HTTPException(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        user.role = payload.role
        return self.repo.update(session, user)

    def update_tier(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserTierUpdate,
    ) -> User:
        """
        Move a member to another tier (admin only).

        Cart and checkout totals pick the new tier up on their next
        computation; nothing cached needs invalidating.
        """
        user = self.get_user(session, user_id)
        logger.info("tier change user=%s %s -> %s", user.id, user.tier, payload.tier.value)
        user.tier = payload.tier.value
        return self.repo.update(session, user)
