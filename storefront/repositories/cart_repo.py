import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.cart import CartItem
from storefront.models.product import Product, Variation


class CartRepository:

    # Get items for a user
    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at)
        )
        return session.exec(stmt).all()

    def list_with_details(
        self, session: Session, user_id: uuid.UUID
    ) -> list[tuple[CartItem, Variation, Product]]:
        """
        Cart rows joined with their variation and parent product, oldest
        first, for building line-item snapshots in one query.
        """
        stmt = (
            select(CartItem, Variation, Product)
            .join(Variation, Variation.id == CartItem.variation_id)
            .join(Product, Product.id == Variation.product_id)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at)
        )
        return session.exec(stmt).all()

    def count_for_user(self, session: Session, user_id: uuid.UUID) -> int:
        """Sum of quantities across the user's cart (0 for an empty cart)."""
        stmt = select(func.coalesce(func.sum(CartItem.quantity), 0)).where(
            CartItem.user_id == user_id
        )
        return int(session.exec(stmt).one())

    def get_item(
        self, session: Session, user_id: uuid.UUID, variation_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.variation_id == variation_id
        )
        return session.exec(stmt).first()

    def get_by_id(self, session: Session, item_id: uuid.UUID) -> CartItem | None:
        return session.get(CartItem, item_id)

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> None:
        for row in self.list_for_user(session, user_id):
            session.delete(row)
        session.commit()
