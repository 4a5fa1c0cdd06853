import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.wishlist import WishlistItem
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.wishlist_repo import WishlistRepository
from storefront.schemas.cart import ProductSnapshot
from storefront.schemas.wishlist import (
    WishlistActionRead,
    WishlistItemRead,
    WishlistRead,
    WishlistStatusRead,
    WishlistVariationRead,
)


class WishlistService:
    """
    Saved-for-later variations.

    Adding an entry that already exists is a success, not an error, so
    the client can retry freely.
    """

    def __init__(self, wishlist_repo: WishlistRepository, product_repo: ProductRepository):
        self.wishlist_repo = wishlist_repo
        self.product_repo = product_repo

    def _ensure_variation(self, session: Session, variation_id: uuid.UUID) -> None:
        if self.product_repo.get_variation(session, variation_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product variation not found",
            )

    def get_wishlist(self, session: Session, user_id: uuid.UUID) -> WishlistRead:
        rows = self.wishlist_repo.list_with_details(session, user_id)
        return WishlistRead(
            wishlist_items=[
                WishlistItemRead(
                    id=item.id,
                    variation_id=item.variation_id,
                    variation=WishlistVariationRead(
                        id=variation.id,
                        name=variation.name,
                        color=variation.color,
                        size=variation.size,
                        sku=variation.sku,
                        available_stock=variation.quantity,
                        price=variation.price,
                        image_url=variation.image_url,
                        product=ProductSnapshot(
                            id=product.id,
                            product_name=product.name,
                            product_img_url=product.image_url,
                        ),
                    ),
                )
                for item, variation, product in rows
            ]
        )

    def add(
        self, session: Session, user_id: uuid.UUID, variation_id: uuid.UUID
    ) -> WishlistActionRead:
        self._ensure_variation(session, variation_id)

        if self.wishlist_repo.get_item(session, user_id, variation_id):
            return WishlistActionRead(message="Item is already in your wishlist")

        self.wishlist_repo.create(
            session, WishlistItem(user_id=user_id, variation_id=variation_id)
        )
        return WishlistActionRead(message="Item added to your wishlist")

    def remove(
        self, session: Session, user_id: uuid.UUID, variation_id: uuid.UUID
    ) -> WishlistActionRead:
        item = self.wishlist_repo.get_item(session, user_id, variation_id)
        if item:
            self.wishlist_repo.delete(session, item)
        return WishlistActionRead(message="Item removed from your wishlist")

    def toggle(
        self, session: Session, user_id: uuid.UUID, variation_id: uuid.UUID
    ) -> WishlistActionRead:
        item = self.wishlist_repo.get_item(session, user_id, variation_id)
        if item:
            self.wishlist_repo.delete(session, item)
            return WishlistActionRead(
                message="Item removed from your wishlist", added=False
            )

        self._ensure_variation(session, variation_id)
        self.wishlist_repo.create(
            session, WishlistItem(user_id=user_id, variation_id=variation_id)
        )
        return WishlistActionRead(message="Item added to your wishlist", added=True)

    def is_in_wishlist(
        self, session: Session, user_id: uuid.UUID, variation_id: uuid.UUID
    ) -> WishlistStatusRead:
        item = self.wishlist_repo.get_item(session, user_id, variation_id)
        return WishlistStatusRead(is_in_wishlist=item is not None)
