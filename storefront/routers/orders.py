import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.core.auth import require_user, require_admin
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import (
    CheckoutSummaryRead,
    OrderCreate,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService(OrderRepository(), CartRepository(), ProductRepository())


# -------- Checkout (customers) --------


@router.get("/checkout/summary", response_model=CheckoutSummaryRead)
def checkout_summary(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Totals for the member's tier and the amount, in cents, checkout would
    charge. Same numbers as GET /cart/totals.
    """
    return service.summarize_checkout(session, current_user)


@router.post(
    "/checkout",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def place_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Turn the cart into a pending order.

    - 400 when the cart is empty
    - 409 when a line no longer fits the stock or its product was retired
    """
    return service.create_order_from_cart(session, current_user, payload)


@router.get("/me", response_model=list[OrderRead])
def my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
    skip: int = 0,
    limit: int = 50,
):
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get("/me/{order_id}", response_model=OrderWithItemsRead)
def my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    One of the member's orders with its lines; 404 for anyone else's.
    """
    return service.get_user_order(session, current_user.id, order_id)


# -------- Back office (admins) --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def admin_list_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
):
    return service.list_all_orders(session, skip, limit, status_filter)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def admin_get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def admin_set_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Move an order along its lifecycle:

      pending    -> processing | cancelled
      processing -> shipped | cancelled | refunded
      shipped    -> delivered
      delivered  -> refunded
    """
    return service.update_status(session, order_id, payload)
