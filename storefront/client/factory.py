import httpx

from storefront.client.cart_actions import CartActions
from storefront.client.cart_store import CartStore
from storefront.client.config import CartClientSettings, get_client_settings
from storefront.client.notifier import Notifier
from storefront.client.remote import HttpCartRemote, HttpWishlistRemote
from storefront.client.storage import JsonFileStorage
from storefront.client.wishlist_store import WishlistStore


def build_cart(
    token: str | None,
    settings: CartClientSettings | None = None,
    notifier: Notifier | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[CartStore, CartActions]:
    """
    Wire a cart store and its actions to the configured API and cache.
    """
    settings = settings or get_client_settings()
    remote = HttpCartRemote(
        settings.API_BASE_URL,
        token=token,
        transport=transport,
        timeout=settings.TIMEOUT,
    )
    store = CartStore(remote, JsonFileStorage(settings.CACHE_DIR), notifier)
    return store, CartActions(store)


def build_wishlist(
    token: str | None,
    settings: CartClientSettings | None = None,
    notifier: Notifier | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> WishlistStore:
    settings = settings or get_client_settings()
    remote = HttpWishlistRemote(
        settings.API_BASE_URL,
        token=token,
        transport=transport,
        timeout=settings.TIMEOUT,
    )
    return WishlistStore(remote, JsonFileStorage(settings.CACHE_DIR), notifier)
