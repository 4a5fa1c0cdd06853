import uuid

from sqlmodel import Session, select

from storefront.models.product import Product, Variation
from storefront.models.wishlist import WishlistItem


class WishlistRepository:

    def list_with_details(
        self, session: Session, user_id: uuid.UUID
    ) -> list[tuple[WishlistItem, Variation, Product]]:
        stmt = (
            select(WishlistItem, Variation, Product)
            .join(Variation, Variation.id == WishlistItem.variation_id)
            .join(Product, Product.id == Variation.product_id)
            .where(WishlistItem.user_id == user_id)
            .order_by(WishlistItem.created_at)
        )
        return session.exec(stmt).all()

    def get_item(
        self, session: Session, user_id: uuid.UUID, variation_id: uuid.UUID
    ) -> WishlistItem | None:
        stmt = select(WishlistItem).where(
            WishlistItem.user_id == user_id,
            WishlistItem.variation_id == variation_id,
        )
        return session.exec(stmt).first()

    def count_for_user(self, session: Session, user_id: uuid.UUID) -> int:
        stmt = select(WishlistItem.id).where(WishlistItem.user_id == user_id)
        return len(session.exec(stmt).all())

    def create(self, session: Session, item: WishlistItem) -> WishlistItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: WishlistItem) -> None:
        session.delete(item)
        session.commit()
