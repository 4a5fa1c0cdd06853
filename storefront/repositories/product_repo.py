import uuid

from sqlmodel import Session, select

from storefront.models.product import Product, Variation


class ProductRepository:
    """
    Data access layer for Product & Variation.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_slug(self, session: Session, slug: str) -> Product | None:
        stmt = select(Product).where(Product.slug == slug)
        return session.exec(stmt).first()

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
        category: str | None = None,
        search: str | None = None,
    ) -> list[Product]:
        stmt = select(Product)
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        if category:
            stmt = stmt.where(Product.category == category)
        if search:
            stmt = stmt.where(Product.name.ilike(f"%{search}%"))
        stmt = stmt.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    # ----- Variations -----

    def get_variation(
        self,
        session: Session,
        variation_id: uuid.UUID,
    ) -> Variation | None:
        return session.get(Variation, variation_id)

    def get_variation_by_sku(self, session: Session, sku: str) -> Variation | None:
        stmt = select(Variation).where(Variation.sku == sku)
        return session.exec(stmt).first()

    def list_variations_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> list[Variation]:
        stmt = (
            select(Variation)
            .where(Variation.product_id == product_id)
            .order_by(Variation.price, Variation.name)
        )
        return session.exec(stmt).all()

    def list_variations_for_products(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> list[Variation]:
        if not product_ids:
            return []
        stmt = select(Variation).where(Variation.product_id.in_(product_ids))
        return session.exec(stmt).all()

    def create_variation(self, session: Session, variation: Variation) -> Variation:
        session.add(variation)
        session.commit()
        session.refresh(variation)
        return variation

    def update_variation(self, session: Session, variation: Variation) -> Variation:
        session.add(variation)
        session.commit()
        session.refresh(variation)
        return variation
