import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.models.order import Order, OrderItem
from storefront.models.cart import CartItem
from storefront.models.product import Product, Variation
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import (
    CheckoutSummaryRead,
    OrderCreate,
    OrderItemRead,
    OrderRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from storefront.services.cart_service import to_line_item
from storefront.services.pricing import round_money
from storefront.services.totals import OrderTotals, compute_order_totals

logger = logging.getLogger(__name__)

# Admin status transitions
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled", "refunded"},
    "shipped": {"delivered"},
    "delivered": {"refunded"},
    "cancelled": set(),
    "refunded": set(),
}


class OrderService:
    """
    Business logic for checkout and orders.

    Responsibilities:
      - Price the cart for the user's tier (same computation as the cart)
      - Validate cart lines against variations (stock, active product)
      - Create a pending order with frozen amounts
      - Deduct variation stock
      - Clear cart after success
      - Enforce status transitions (admin)

    Taking the payment is the payment provider's job; the order carries
    `amount_minor`/`currency` for it and a `payment_reference` slot.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.currency = get_settings().CURRENCY

    # -------- Checkout --------

    def _priced_cart(
        self, session: Session, user: User
    ) -> tuple[list[tuple[CartItem, Variation, Product]], OrderTotals]:
        rows = self.cart_repo.list_with_details(session, user.id)
        if not rows:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot proceed: Cart is empty.",
            )
        line_items = [to_line_item(item, variation, product) for item, variation, product in rows]
        return rows, compute_order_totals(line_items, user.tier)

    def summarize_checkout(self, session: Session, user: User) -> CheckoutSummaryRead:
        """
        What checkout would charge right now, without side effects.
        """
        _, totals = self._priced_cart(session, user)
        return CheckoutSummaryRead(
            totals=totals.to_read(),
            amount_minor=totals.amount_minor,
            currency=self.currency,
        )

    def create_order_from_cart(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Convert the current user's cart into a pending Order.

        Steps:
          1. Load and price the cart; error if empty.
          2. For each cart line:
             - Ensure the product is active.
             - Ensure quantity <= variation stock.
          3. Reject non-positive totals.
          4. Create Order row (status='pending') with frozen amounts.
          5. Create OrderItem rows.
          6. Deduct variation stock.
          7. Clear cart.
          8. Commit transaction and return full order.
        """
        rows, totals = self._priced_cart(session, user)

        errors: list[dict[str, str]] = []
        for ci, variation, product in rows:
            if not product.is_active:
                errors.append(
                    {"variation_id": str(ci.variation_id), "reason": "Product is inactive"}
                )
            elif ci.quantity > variation.quantity:
                errors.append(
                    {
                        "variation_id": str(ci.variation_id),
                        "reason": f"Only {variation.quantity} items available in stock",
                    }
                )

        if errors:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"message": "Cart validation failed", "items": errors},
            )

        if totals.amount_minor <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order amount must be positive.",
            )

        order = Order(
            user_id=user.id,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            phone=payload.phone,
            street_address=payload.street_address,
            apartment_suite=payload.apartment_suite,
            town_city=payload.town_city,
            province=payload.province,
            postcode=payload.postcode,
            country_region=payload.country_region,
            method_of_collection=payload.method_of_collection,
            order_notes=payload.order_notes,
            status="pending",
            tier=totals.tier.value,
            subtotal=float(totals.subtotal),
            discount_amount=float(totals.discount_amount),
            total_amount=float(totals.discounted_subtotal),
            amount_minor=totals.amount_minor,
            currency=self.currency,
        )
        order = self.order_repo.create_order(session, order)

        order_items: list[OrderItem] = []
        for (ci, variation, product), line in zip(rows, totals.lines):
            order_items.append(
                OrderItem(
                    order_id=order.id,
                    variation_id=ci.variation_id,
                    quantity=ci.quantity,
                    unit_price=float(line.unit_price),
                    discounted_unit_price=float(round_money(line.discounted_unit_price)),
                    line_total=float(round_money(line.discounted_line_total)),
                    product_name=product.name,
                    variation_name=variation.name,
                )
            )
        order_items = self.order_repo.create_items(session, order_items)

        for ci, variation, _ in rows:
            variation.quantity -= ci.quantity
            session.add(variation)
            session.delete(ci)

        session.commit()
        session.refresh(order)

        logger.info(
            "order %s created user=%s tier=%s amount_minor=%s",
            order.id, user.id, order.tier, order.amount_minor,
        )
        return self._build_order_with_items_dto(order, order_items)

    # -------- Customer views --------

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        return self.order_repo.list_for_user(session, user_id, skip, limit)  # type: ignore[return-value]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status_filter: str | None = None,
    ) -> list[OrderRead]:
        return self.order_repo.list_all(session, skip, limit, status_filter)  # type: ignore[return-value]

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin-only status update following ALLOWED_TRANSITIONS.

        Any invalid transition raises 400.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        current = order.status
        new = payload.status

        if current == new:
            return order  # type: ignore[return-value]

        if new not in ALLOWED_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        order.status = new
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)
        return order  # type: ignore[return-value]

    # -------- Helper DTO builder --------

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        return OrderWithItemsRead(
            **order.model_dump(),
            items=[
                OrderItemRead(
                    id=it.id,
                    order_id=it.order_id,
                    variation_id=it.variation_id,
                    product_name=it.product_name,
                    variation_name=it.variation_name,
                    quantity=it.quantity,
                    unit_price=it.unit_price,
                    discounted_unit_price=it.discounted_unit_price,
                    line_total=it.line_total,
                )
                for it in items
            ],
        )
