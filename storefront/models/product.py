import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Prices and stock live on the variations; the product only carries the
    shared presentation fields.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        min_length=3,
        index=True,
        description="Display name of the product",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description / HTML",
    )

    category: str = Field(
        default="general",
        max_length=50,
        index=True,
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    image_url: str | None = Field(
        default=None,
        description="Main product image URL",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Variation(SQLModel, table=True):
    """
    Purchasable SKU of a product (a specific size/colour).

    Carries its own list price and stock; cart lines and wishlist entries
    point here, never at the product.
    """

    __tablename__ = "variations"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
        description="FK to products.id",
    )

    name: str = Field(max_length=100)
    color: str | None = Field(default=None, max_length=50)
    size: str | None = Field(default=None, max_length=50)

    sku: str = Field(
        max_length=64,
        unique=True,
        index=True,
    )

    price: float = Field(
        gt=0,
        description="List price before member discount",
    )

    quantity: int = Field(
        default=0,
        ge=0,
        description="Units currently in stock",
    )

    image_url: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
