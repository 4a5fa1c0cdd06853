"""
Bearer-token authentication for the storefront API.

Tokens are issued by the external auth provider; this module only
verifies them, maps them to a `User` row (creating one on first sight)
and exposes the role guards routers depend on.
"""
import logging
import uuid
from typing import Any, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.models.user import User
from storefront.services.pricing import BASELINE_TIER

logger = logging.getLogger(__name__)
settings = get_settings()

LOGIN_REQUIRED = "You must be logged in to continue"

# auto_error=False: a missing header means "guest", not an error.
# Catalog routes accept guests; everything else goes through require_auth.
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=LOGIN_REQUIRED,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry of a provider-issued JWT.

    The audience claim differs between provider environments and is not
    checked.

    Raises:
        HTTPException(401): if the token is invalid or expired.
    """
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise _unauthorized()


def identity_from_claims(claims: dict[str, Any]) -> tuple[uuid.UUID, str]:
    """
    Extract (user id, email) from verified claims.

    Raises:
        HTTPException(401): if `sub` is missing or not a UUID, or `email` is missing.
    """
    sub = claims.get("sub")
    email = claims.get("email")
    if not sub or not email:
        raise _unauthorized()
    try:
        return uuid.UUID(str(sub)), email
    except ValueError:
        raise _unauthorized()


def provision_user(session: Session, user_id: uuid.UUID, email: str) -> User:
    """
    First request of a new account: create its profile as a customer on
    the baseline tier. Admins are promoted by hand.
    """
    user = User(
        id=user_id,
        email=email,
        name=email.split("@", 1)[0] if "@" in email else email,
        role="user",
        tier=BASELINE_TIER.value,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("provisioned profile for %s", user_id)
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    The signed-in user, or None for guests.

    A present but invalid token is a 401, never a silent guest.
    """
    if credentials is None:
        return None

    user_id, email = identity_from_claims(decode_access_token(credentials.credentials))
    user = session.get(User, user_id)
    if user is None:
        user = provision_user(session, user_id, email)
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Reject guests with 401 "You must be logged in to continue".
    """
    if user is None:
        raise _unauthorized()
    return user


def _role_guard(role: str, detail: str) -> Callable[[User], User]:
    def guard(user: User = Depends(require_auth)) -> User:
        if user.role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    guard.__name__ = f"require_{role}"
    return guard


# Back-office routes
require_admin = _role_guard("admin", "Admin access required")

# Cart, wishlist and checkout: customers only, admins get 403
require_user = _role_guard("user", "Customer access required")
