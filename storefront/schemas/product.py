import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - slug is optional: if omitted, generated from `name`.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100, min_length=3)
    slug: str | None = None
    description: str | None = None
    category: str = Field(default="general", max_length=50)
    is_active: bool = True
    image_url: str | None = None

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("slug cannot be empty if provided")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    category: str | None = Field(default=None, max_length=50)
    is_active: bool | None = None
    image_url: str | None = None

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class VariationCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    color: str | None = None
    size: str | None = None
    sku: str = Field(max_length=64)
    price: float = Field(gt=0)
    quantity: int = Field(default=0, ge=0)
    image_url: str | None = None

    @field_validator("name", "sku")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class VariationUpdate(SQLModel):
    """
    Admin restock / repricing. Only provided fields change.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, gt=0)
    quantity: int | None = Field(default=None, ge=0)
    image_url: str | None = None


class VariationRead(SQLModel):
    """
    Variation as shown in the catalog.

    `discounted_price` is the list price after the viewer's member
    discount, rounded to cents; guests see the list price.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    name: str
    color: str | None
    size: str | None
    sku: str
    price: float
    discounted_price: Decimal
    available_stock: int
    image_url: str | None


class ProductRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None
    category: str
    is_active: bool
    image_url: str | None
    created_at: datetime
    variations: list[VariationRead] = []
