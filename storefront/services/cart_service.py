import logging
import uuid

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlmodel import Session

from storefront.models.cart import CartItem
from storefront.models.product import Product, Variation
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartClearRead,
    CartCountRead,
    CartItemCreate,
    CartItemUpdate,
    CartItemsRead,
    CartLineItem,
    CartMutationRead,
    CartTotalsRead,
    ProductSnapshot,
    VariationSnapshot,
)
from storefront.services.totals import InvalidPriceError, compute_order_totals

logger = logging.getLogger(__name__)


def stock_conflict(available: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Only {available} items available in stock",
    )


def to_line_item(item: CartItem, variation: Variation, product: Product) -> CartLineItem:
    """
    Build the denormalized line-item snapshot sent to clients.

    Raises:
        InvalidPriceError: if the stored variation cannot be priced.
    """
    try:
        snapshot = VariationSnapshot(
            id=variation.id,
            name=variation.name,
            price=variation.price,
            available_stock=variation.quantity,
            image_url=variation.image_url,
            product=ProductSnapshot(
                id=product.id,
                product_name=product.name,
                product_img_url=product.image_url,
            ),
        )
    except ValidationError as e:
        raise InvalidPriceError(
            f"Variation {variation.id} has unusable data: price={variation.price!r}"
        ) from e

    return CartLineItem(
        id=item.id,
        variation_id=item.variation_id,
        quantity=item.quantity,
        variation=snapshot,
    )


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - ensure only customer accounts use the cart (via router dependency)
      - validate variation existence and that its product is active
      - enforce quantity <= variation stock on every write
      - quantities are absolute; 0 deletes the row
      - report the new item count after every mutation
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_valid_variation(self, session: Session, variation_id: uuid.UUID) -> Variation:
        variation = self.product_repo.get_variation(session, variation_id)
        if not variation:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product variation not found",
            )
        product = self.product_repo.get_by_id(session, variation.product_id)
        if product is None or not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is inactive",
            )
        return variation

    def _get_owned_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        line_item_id: uuid.UUID,
    ) -> CartItem:
        item = self.cart_repo.get_by_id(session, line_item_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cart item not found",
            )
        if item.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Unauthorized access to cart item",
            )
        return item

    # ---- reads ----

    def get_count(self, session: Session, user_id: uuid.UUID) -> CartCountRead:
        return CartCountRead(
            cart_item_count=self.cart_repo.count_for_user(session, user_id)
        )

    def list_line_items(self, session: Session, user_id: uuid.UUID) -> list[CartLineItem]:
        rows = self.cart_repo.list_with_details(session, user_id)
        return [to_line_item(item, variation, product) for item, variation, product in rows]

    def get_items(self, session: Session, user_id: uuid.UUID) -> CartItemsRead:
        return CartItemsRead(items=self.list_line_items(session, user_id))

    def get_totals(self, session: Session, user: User) -> CartTotalsRead:
        """
        Tier-priced totals of the user's cart, computed exactly as checkout
        computes them.
        """
        items = self.list_line_items(session, user.id)
        return compute_order_totals(items, user.tier).to_read()

    # ---- mutations ----

    def add_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> CartMutationRead:
        """
        Add a variation to the user's cart, merging into an existing line.

        Rules:
          - variation must exist and its product must be active
          - existing_quantity + quantity <= variation stock (409 otherwise)
        """
        variation = self._get_valid_variation(session, payload.variation_id)

        if payload.quantity > variation.quantity:
            raise stock_conflict(variation.quantity)

        existing = self.cart_repo.get_item(session, user_id, payload.variation_id)

        if existing:
            new_qty = existing.quantity + payload.quantity
            if new_qty > variation.quantity:
                raise stock_conflict(variation.quantity)
            existing.quantity = new_qty
            self.cart_repo.update(session, existing)
        else:
            self.cart_repo.create(
                session,
                CartItem(
                    user_id=user_id,
                    variation_id=payload.variation_id,
                    quantity=payload.quantity,
                ),
            )

        logger.info(
            "cart add user=%s variation=%s qty=%s",
            user_id, payload.variation_id, payload.quantity,
        )
        return CartMutationRead(
            message="Item added to cart successfully",
            cart_item_count=self.cart_repo.count_for_user(session, user_id),
        )

    def update_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        line_item_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartMutationRead:
        """
        Set the absolute quantity of a cart line.

        Quantity 0 removes the line; anything above the variation's stock
        is rejected with 409.
        """
        item = self._get_owned_item(session, user_id, line_item_id)

        if payload.quantity == 0:
            self.cart_repo.delete(session, item)
            message = "Item removed from cart"
        else:
            variation = self.product_repo.get_variation(session, item.variation_id)
            if variation is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Product variation not found",
                )
            if payload.quantity > variation.quantity:
                raise stock_conflict(variation.quantity)

            item.quantity = payload.quantity
            self.cart_repo.update(session, item)
            message = "Cart updated successfully"

        return CartMutationRead(
            message=message,
            cart_item_count=self.cart_repo.count_for_user(session, user_id),
        )

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> CartClearRead:
        """
        Remove every line from the user's cart.
        """
        self.cart_repo.clear_user_cart(session, user_id)
        return CartClearRead(message="Cart cleared successfully")
