import re
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.product import Product, Variation
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductUpdate,
    VariationCreate,
    VariationRead,
    VariationUpdate,
)
from storefront.services.pricing import Tier, round_money, tier_pricing


class ProductService:
    """
    Business logic for the catalog.

    Responsibilities:
      - slug generation & uniqueness
      - SKU uniqueness for variations
      - catalog filters (category, search, price range, in-stock)
      - pricing every variation for the viewer's membership tier
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _slugify(raw: str) -> str:
        """
        Basic slugification:
          - lowercase
          - non-alphanumeric -> '-'
          - collapse multiple '-'
          - strip leading/trailing '-'
        """
        value = raw.strip().lower()
        value = re.sub(r"[^a-z0-9]+", "-", value)
        value = re.sub(r"-+", "-", value)
        value = value.strip("-")
        return value or "product"

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while self.repo.get_by_slug(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    @staticmethod
    def _variation_read(variation: Variation, tier: Tier | str | None) -> VariationRead:
        pricing = tier_pricing(tier)
        return VariationRead(
            id=variation.id,
            product_id=variation.product_id,
            name=variation.name,
            color=variation.color,
            size=variation.size,
            sku=variation.sku,
            price=variation.price,
            discounted_price=round_money(pricing.price(variation.price)),
            available_stock=variation.quantity,
            image_url=variation.image_url,
        )

    def _product_read(
        self,
        product: Product,
        variations: list[Variation],
        tier: Tier | str | None,
    ) -> ProductRead:
        return ProductRead(
            id=product.id,
            name=product.name,
            slug=product.slug,
            description=product.description,
            category=product.category,
            is_active=product.is_active,
            image_url=product.image_url,
            created_at=product.created_at,
            variations=[self._variation_read(v, tier) for v in variations],
        )

    # ----- Catalog -----

    def list_products(
        self,
        session: Session,
        tier: Tier | str | None = None,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
        category: str | None = None,
        search: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        in_stock: bool = False,
    ) -> list[ProductRead]:
        """
        Catalog listing with tier-priced variations.

        Price bounds apply to the list price of each variation. A product
        is kept when at least one of its variations survives the filters,
        and only the surviving variations are returned.
        """
        products = self.repo.list_products(
            session,
            skip=skip,
            limit=limit,
            only_active=only_active,
            category=category,
            search=search,
        )
        by_product: dict[uuid.UUID, list[Variation]] = {p.id: [] for p in products}
        for v in self.repo.list_variations_for_products(session, list(by_product)):
            if min_price is not None and v.price < min_price:
                continue
            if max_price is not None and v.price > max_price:
                continue
            if in_stock and v.quantity <= 0:
                continue
            by_product[v.product_id].append(v)

        filtering = min_price is not None or max_price is not None or in_stock
        results: list[ProductRead] = []
        for product in products:
            variations = sorted(by_product[product.id], key=lambda v: (v.price, v.name))
            if filtering and not variations:
                continue
            results.append(self._product_read(product, variations, tier))
        return results

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def get_product_read(
        self,
        session: Session,
        product_id: uuid.UUID,
        tier: Tier | str | None = None,
    ) -> ProductRead:
        product = self.get_product(session, product_id)
        variations = self.repo.list_variations_for_product(session, product.id)
        return self._product_read(product, variations, tier)

    # ----- Admin -----

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
    ) -> ProductRead:
        """
        Create a new product with a unique slug.

        - If slug is provided => slugify & ensure unique.
        - Else => slugify from name & ensure unique.
        """
        raw_slug = payload.slug or payload.name
        slug = self._ensure_unique_slug(session, self._slugify(raw_slug))

        product = Product(
            name=payload.name,
            slug=slug,
            description=payload.description,
            category=payload.category,
            is_active=payload.is_active,
            image_url=payload.image_url,
        )
        product = self.repo.create(session, product)
        return self._product_read(product, [], None)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> ProductRead:
        product = self.get_product(session, product_id)

        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(product, field, value)

        product = self.repo.update(session, product)
        variations = self.repo.list_variations_for_product(session, product.id)
        return self._product_read(product, variations, None)

    def add_variation(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: VariationCreate,
    ) -> VariationRead:
        product = self.get_product(session, product_id)

        if self.repo.get_variation_by_sku(session, payload.sku) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="SKU already exists",
            )

        variation = Variation(product_id=product.id, **payload.model_dump())
        variation = self.repo.create_variation(session, variation)
        return self._variation_read(variation, None)

    def update_variation(
        self,
        session: Session,
        variation_id: uuid.UUID,
        payload: VariationUpdate,
    ) -> VariationRead:
        """
        Reprice or restock a variation.

        Lowering stock below what customers hold in their carts is allowed;
        those carts fail the stock check on their next write or at checkout.
        """
        variation = self.repo.get_variation(session, variation_id)
        if variation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product variation not found",
            )

        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(variation, field, value)

        variation = self.repo.update_variation(session, variation)
        return self._variation_read(variation, None)
