import logging
import uuid

from pydantic import BaseModel, ValidationError

from storefront.client.notifier import LoggingNotifier, Notifier
from storefront.client.remote import WishlistRemote
from storefront.client.result import CartErrorKind, Err, Ok, Result, err
from storefront.client.storage import MemoryStorage, Storage
from storefront.schemas.wishlist import WishlistItemRead

logger = logging.getLogger(__name__)

STORAGE_SLOT = "wishlist-store"


class WishlistSnapshot(BaseModel):
    """
    What the `wishlist-store` slot holds.

    Variation ids are stored as a list and rebuilt into a set on load.
    """

    wishlist_items: list[WishlistItemRead] = []
    variation_ids: list[uuid.UUID] = []


class WishlistStore:
    """
    Client-side wishlist with a fast `is_in_wishlist` lookup.
    """

    def __init__(
        self,
        remote: WishlistRemote,
        storage: Storage | None = None,
        notifier: Notifier | None = None,
    ):
        self.remote = remote
        self.storage = storage if storage is not None else MemoryStorage()
        self.notifier = notifier if notifier is not None else LoggingNotifier()

        self.wishlist_items: list[WishlistItemRead] = []
        self.variation_ids: set[uuid.UUID] = set()
        self.is_loading = False
        self.is_processing = False

        self._hydrate()

    def is_in_wishlist(self, variation_id: uuid.UUID) -> bool:
        return variation_id in self.variation_ids

    def _hydrate(self) -> None:
        data = self.storage.load(STORAGE_SLOT)
        if data is None:
            return
        try:
            snapshot = WishlistSnapshot.model_validate(data)
        except ValidationError as e:
            logger.warning("Discarding persisted wishlist: %s", e)
            return
        self.wishlist_items = list(snapshot.wishlist_items)
        self.variation_ids = set(snapshot.variation_ids)

    def _persist(self) -> None:
        snapshot = WishlistSnapshot(
            wishlist_items=self.wishlist_items,
            variation_ids=sorted(self.variation_ids, key=str),
        )
        try:
            self.storage.save(STORAGE_SLOT, snapshot.model_dump(mode="json"))
        except OSError as e:
            logger.warning("Could not persist wishlist: %s", e)

    def _set_items(self, items: list[WishlistItemRead]) -> None:
        self.wishlist_items = list(items)
        self.variation_ids = {i.variation_id for i in items}
        self._persist()

    async def fetch(self) -> Result[list[WishlistItemRead]]:
        if not self.remote.authenticated:
            return err(CartErrorKind.AUTH, "You must be logged in to view your wishlist")

        self.is_loading = True
        try:
            result = await self.remote.fetch_wishlist()
        finally:
            self.is_loading = False

        if isinstance(result, Err):
            logger.warning("Wishlist fetch failed: %s", result.message)
            return result
        self._set_items(result.value)
        return result

    async def add(self, variation_id: uuid.UUID) -> Result[bool]:
        """Save a variation, then reload to pick up its product details."""
        if not self.remote.authenticated:
            return self._fail(CartErrorKind.AUTH, "Please log in to save items")

        self.is_processing = True
        try:
            result = await self.remote.add_to_wishlist(variation_id)
            if isinstance(result, Err):
                self.notifier.error(result.message)
                return result
            self.variation_ids.add(variation_id)
            self._persist()
            await self.fetch()
        finally:
            self.is_processing = False

        self.notifier.success(result.value.message)
        return Ok(True)

    async def remove(self, variation_id: uuid.UUID) -> Result[bool]:
        if not self.remote.authenticated:
            return self._fail(CartErrorKind.AUTH, "Please log in to manage your wishlist")

        self.is_processing = True
        try:
            result = await self.remote.remove_from_wishlist(variation_id)
        finally:
            self.is_processing = False

        if isinstance(result, Err):
            self.notifier.error(result.message)
            return result

        self._set_items([i for i in self.wishlist_items if i.variation_id != variation_id])
        self.notifier.success(result.value.message)
        return Ok(False)

    async def toggle(self, variation_id: uuid.UUID) -> Result[bool]:
        """Add or remove; the Ok value tells whether it is now saved."""
        if self.is_in_wishlist(variation_id):
            return await self.remove(variation_id)
        return await self.add(variation_id)

    def _fail(self, kind: CartErrorKind, message: str) -> Err:
        self.notifier.error(message)
        return err(kind, message)

    async def dispose(self) -> None:
        """Close the remote; the persisted slot is left in place."""
        await self.remote.aclose()
