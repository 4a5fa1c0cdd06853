"""
Cart mutations on top of a `CartStore`.

Each operation checks the session first, validates its input against
what the store knows, then talks to the server. Updates and clears are
optimistic and roll back to the exact previous lines and count on
failure. Results come back as `Ok(item_count)` or `Err(...)`.
"""
import logging
import uuid

from storefront.client.cart_store import CartStore
from storefront.client.result import CartErrorKind, Err, Ok, Result, err

logger = logging.getLogger(__name__)

LOGIN_MESSAGE = "You must be logged in to manage your cart"
BUSY_MESSAGE = "Another cart update is in progress"


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def stock_message(available: int) -> str:
    return f"Only {available} items available in stock"


class CartActions:
    def __init__(self, store: CartStore):
        self.store = store

    @property
    def notifier(self):
        return self.store.notifier

    def _fail(self, kind: CartErrorKind, message: str) -> Err:
        self.notifier.error(message)
        return err(kind, message)

    def _check_session(self) -> Err | None:
        if not self.store.remote.authenticated:
            return self._fail(CartErrorKind.AUTH, LOGIN_MESSAGE)
        return None

    async def _ensure_loaded(self, operation: str) -> Err | None:
        """Initialize the store; return the failure, logged, if it did not load."""
        loaded = await self.store.initialize()
        if isinstance(loaded, Err):
            logger.warning("%s on an unloaded cart: %s", operation, loaded.message)
            return loaded
        return None

    async def add_item(self, variation_id: uuid.UUID | str, quantity: int = 1) -> Result[int]:
        """
        Add `quantity` of a variation. The server merges it into an
        existing line for the same variation.
        """
        denied = self._check_session()
        if denied:
            return denied

        vid = _as_uuid(variation_id)
        if vid is None:
            return self._fail(CartErrorKind.VALIDATION, "Invalid product variation")
        if not _is_count(quantity) or quantity == 0:
            return self._fail(CartErrorKind.VALIDATION, "Quantity must be a positive whole number")

        # The server validates the add; an unloaded cart only skips the local stock check
        await self._ensure_loaded("add")

        existing = self.store.find_by_variation(vid)
        if existing is not None:
            available = existing.variation.available_stock
            if existing.quantity + quantity > available:
                return self._fail(CartErrorKind.STOCK_CONFLICT, stock_message(available))

        if self.store.is_loading:
            return err(CartErrorKind.BUSY, BUSY_MESSAGE)

        with self.store.foreground():
            self.store.invalidate_fetches()
            result = await self.store.remote.add_cart_item(vid, quantity)
            if isinstance(result, Err):
                self.notifier.error(result.message)
                return result

            confirmed = result.value.cart_item_count
            if confirmed is not None:
                self.store.apply(self.store.items, confirmed)
            synced = await self.store.sync_items()

        if isinstance(synced, Err):
            logger.warning("Could not reload cart after add: %s", synced.message)
            self.store.apply(self.store.items)
            self.store.schedule_refresh()

        self.notifier.success(result.value.message)
        return Ok(self.store.item_count)

    async def update_item(self, line_item_id: uuid.UUID | str, quantity: int) -> Result[int]:
        """
        Set the absolute quantity of a cart line; 0 removes it.

        Quantities above the known stock are clamped to it.
        """
        denied = self._check_session()
        if denied:
            return denied

        lid = _as_uuid(line_item_id)
        if lid is None:
            return self._fail(CartErrorKind.VALIDATION, "Invalid cart item")
        if not _is_count(quantity):
            return self._fail(CartErrorKind.VALIDATION, "Quantity must be a non-negative whole number")

        unloaded = await self._ensure_loaded("update")
        if unloaded:
            self.notifier.error(unloaded.message)
            return unloaded

        line = self.store.find_line(lid)
        if line is None:
            return self._fail(CartErrorKind.NOT_FOUND, "Cart item not found")

        available = line.variation.available_stock
        if quantity > available:
            self.notifier.error(stock_message(available))
            quantity = available

        if quantity == line.quantity:
            return Ok(self.store.item_count)

        if self.store.is_loading:
            return err(CartErrorKind.BUSY, BUSY_MESSAGE)

        previous_items = self.store.items
        previous_count = self.store.item_count
        needs_refresh = False

        with self.store.foreground():
            self.store.invalidate_fetches()
            if quantity == 0:
                optimistic = [i for i in previous_items if i.id != lid]
            else:
                optimistic = [
                    i.model_copy(update={"quantity": quantity}) if i.id == lid else i
                    for i in previous_items
                ]
            self.store.apply(optimistic)

            result = await self.store.remote.update_cart_item(lid, quantity)
            if isinstance(result, Err):
                self.store.apply(previous_items, previous_count)
                needs_refresh = True
            else:
                confirmed = result.value.cart_item_count
                if confirmed is not None:
                    self.store.apply(self.store.items, confirmed)
                synced = await self.store.sync_items()
                if isinstance(synced, Err):
                    logger.warning("Could not reload cart after update: %s", synced.message)
                    self.store.apply(self.store.items)
                    needs_refresh = True

        if needs_refresh:
            self.store.schedule_refresh()
        if isinstance(result, Err):
            self.notifier.error(result.message)
            return result

        self.notifier.success(result.value.message)
        return Ok(self.store.item_count)

    async def remove_item(self, line_item_id: uuid.UUID | str) -> Result[int]:
        return await self.update_item(line_item_id, 0)

    async def clear_cart(self) -> Result[int]:
        denied = self._check_session()
        if denied:
            return denied

        # Clearing needs no local lines
        await self._ensure_loaded("clear")

        if self.store.is_loading:
            return err(CartErrorKind.BUSY, BUSY_MESSAGE)

        previous_items = self.store.items
        previous_count = self.store.item_count

        with self.store.foreground():
            self.store.invalidate_fetches()
            self.store.apply([], 0)
            result = await self.store.remote.clear_cart()
            if isinstance(result, Err):
                self.store.apply(previous_items, previous_count)

        if isinstance(result, Err):
            self.store.schedule_refresh()
            self.notifier.error(result.message)
            return result

        self.notifier.success(result.value.message)
        return Ok(0)
