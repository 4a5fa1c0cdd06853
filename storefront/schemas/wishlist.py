import uuid

from sqlmodel import SQLModel

from storefront.schemas.cart import ProductSnapshot


class WishlistVariationRead(SQLModel):
    id: uuid.UUID
    name: str
    color: str | None = None
    size: str | None = None
    sku: str
    available_stock: int
    price: float
    image_url: str | None = None
    product: ProductSnapshot


class WishlistItemRead(SQLModel):
    id: uuid.UUID
    variation_id: uuid.UUID
    variation: WishlistVariationRead


class WishlistRead(SQLModel):
    success: bool = True
    wishlist_items: list[WishlistItemRead]


class WishlistActionRead(SQLModel):
    """
    Outcome of add/remove/toggle.

    `added` is only set by toggle: True when the variation was added,
    False when it was removed.
    """

    success: bool = True
    message: str
    added: bool | None = None


class WishlistStatusRead(SQLModel):
    success: bool = True
    is_in_wishlist: bool
