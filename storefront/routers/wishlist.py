import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_user
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.wishlist_repo import WishlistRepository
from storefront.schemas.wishlist import (
    WishlistActionRead,
    WishlistRead,
    WishlistStatusRead,
)
from storefront.services.wishlist_service import WishlistService

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

service = WishlistService(WishlistRepository(), ProductRepository())


@router.get("", response_model=WishlistRead)
def get_wishlist(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    return service.get_wishlist(session, current_user.id)


@router.get("/{variation_id}", response_model=WishlistStatusRead)
def is_in_wishlist(
    variation_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    return service.is_in_wishlist(session, current_user.id, variation_id)


@router.post("/{variation_id}", response_model=WishlistActionRead)
def add_to_wishlist(
    variation_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Save a variation. Saving it twice is not an error.
    """
    return service.add(session, current_user.id, variation_id)


@router.delete("/{variation_id}", response_model=WishlistActionRead)
def remove_from_wishlist(
    variation_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    return service.remove(session, current_user.id, variation_id)


@router.post("/{variation_id}/toggle", response_model=WishlistActionRead)
def toggle_wishlist_item(
    variation_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Add the variation if absent, remove it if present.
    """
    return service.toggle(session, current_user.id, variation_id)
