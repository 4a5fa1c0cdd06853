import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_user
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartClearRead,
    CartCountRead,
    CartItemCreate,
    CartItemUpdate,
    CartItemsRead,
    CartMutationRead,
    CartTotalsRead,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("/count", response_model=CartCountRead)
def get_cart_count(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Total quantity across the current user's cart.
    """
    return service.get_count(session, current_user.id)


@router.get("/items", response_model=CartItemsRead)
def get_cart_items(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Cart lines with their variation/product snapshots.
    """
    return service.get_items(session, current_user.id)


@router.get("/totals", response_model=CartTotalsRead)
def get_cart_totals(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Subtotal, member discount and discounted total for the current tier.
    """
    return service.get_totals(session, current_user)


@router.post("/items", response_model=CartMutationRead)
def add_cart_item(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Add a variation to the cart (merges with an existing line).

    409 when the requested quantity exceeds the stock.
    """
    return service.add_item(session, current_user.id, payload)


@router.patch("/items/{line_item_id}", response_model=CartMutationRead)
def update_cart_item(
    line_item_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Set the absolute quantity of a cart line; 0 removes it.
    """
    return service.update_item(
        session=session,
        user_id=current_user.id,
        line_item_id=line_item_id,
        payload=payload,
    )


@router.delete("", response_model=CartClearRead)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Clear the entire cart.
    """
    return service.clear_cart(session, current_user.id)
