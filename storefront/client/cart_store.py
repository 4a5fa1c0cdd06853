"""
Client-side cart state.

`CartStore` holds the last known cart (lines plus item count), keeps it
in the `cart-storage` slot and reconciles it with the server. It is built
explicitly with its collaborators and owns the background tasks it
starts; call `dispose()` when done with it.

States:
  UNINITIALIZED -> INITIALIZING -> READY

`is_loading` (foreground work, e.g. a mutation) and
`is_background_fetching` (silent refresh) only change while READY.

Every fetch kind ("count", "items") carries a sequence number. A response
is applied only if no newer request of that kind was dispatched after it,
and mutations bump both sequences so a refresh that was already in flight
cannot overwrite an optimistic update.
"""
import asyncio
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ValidationError

from storefront.client.notifier import LoggingNotifier, Notifier
from storefront.client.remote import CartRemote
from storefront.client.result import Err, Ok, Result
from storefront.client.storage import MemoryStorage, Storage
from storefront.schemas.cart import CartLineItem
from storefront.services.pricing import Tier
from storefront.services.totals import OrderTotals, compute_order_totals

logger = logging.getLogger(__name__)

STORAGE_SLOT = "cart-storage"


class CartState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class CartSnapshot(BaseModel):
    """What the `cart-storage` slot holds."""

    items: list[CartLineItem] = []
    item_count: int = 0
    is_initialized: bool = False
    last_updated: datetime | None = None


class CartStore:
    def __init__(
        self,
        remote: CartRemote,
        storage: Storage | None = None,
        notifier: Notifier | None = None,
    ):
        self.remote = remote
        self.storage = storage if storage is not None else MemoryStorage()
        self.notifier = notifier if notifier is not None else LoggingNotifier()

        self.state = CartState.UNINITIALIZED
        self.is_loading = False
        self.is_background_fetching = False
        self.last_updated: datetime | None = None

        self._items: list[CartLineItem] = []
        self._item_count = 0
        self._seq = {"count": 0, "items": 0}
        self._init_task: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()
        self._disposed = False

    # -------- Getters --------

    @property
    def items(self) -> list[CartLineItem]:
        return list(self._items)

    @property
    def item_count(self) -> int:
        return self._item_count

    @property
    def is_empty(self) -> bool:
        return self._item_count == 0

    @property
    def is_ready(self) -> bool:
        return self.state is CartState.READY

    @property
    def total_price(self) -> Decimal:
        """List-price total, before any member discount."""
        return compute_order_totals(self._items, None).subtotal

    def totals(self, tier: Tier | str | None) -> OrderTotals:
        return compute_order_totals(self._items, tier)

    def find_line(self, line_item_id: uuid.UUID) -> CartLineItem | None:
        return next((i for i in self._items if i.id == line_item_id), None)

    def find_by_variation(self, variation_id: uuid.UUID) -> CartLineItem | None:
        return next((i for i in self._items if i.variation_id == variation_id), None)

    # -------- State writes --------

    def apply(self, items: Iterable[CartLineItem], item_count: int | None = None) -> None:
        """
        Replace the cart lines and the item count together.

        Without an explicit count the count is the sum of line quantities.
        """
        new_items = list(items)
        self._items = new_items
        self._item_count = (
            item_count if item_count is not None else sum(i.quantity for i in new_items)
        )
        self.last_updated = datetime.now(timezone.utc)
        self._persist()

    def invalidate_fetches(self) -> None:
        """Make every in-flight fetch stale."""
        for kind in self._seq:
            self._seq[kind] += 1

    @contextmanager
    def foreground(self):
        self.is_loading = True
        try:
            yield
        finally:
            self.is_loading = False

    # -------- Persistence --------

    def _persist(self) -> None:
        snapshot = CartSnapshot(
            items=self._items,
            item_count=self._item_count,
            is_initialized=self.state is CartState.READY,
            last_updated=self.last_updated,
        )
        try:
            self.storage.save(STORAGE_SLOT, snapshot.model_dump(mode="json"))
        except OSError as e:
            logger.warning("Could not persist cart: %s", e)

    def _hydrate(self) -> bool:
        data = self.storage.load(STORAGE_SLOT)
        if data is None:
            return False
        try:
            snapshot = CartSnapshot.model_validate(data)
        except ValidationError as e:
            logger.warning("Discarding persisted cart: %s", e)
            return False
        self._items = list(snapshot.items)
        self._item_count = snapshot.item_count
        self.last_updated = snapshot.last_updated
        return snapshot.is_initialized

    # -------- Fetching --------

    async def _fetch_count(self) -> tuple[Result[int], bool]:
        self._seq["count"] += 1
        seq = self._seq["count"]
        result = await self.remote.fetch_cart_item_count()
        return result, seq == self._seq["count"]

    async def _fetch_items(self) -> tuple[Result[list[CartLineItem]], bool]:
        self._seq["items"] += 1
        seq = self._seq["items"]
        result = await self.remote.fetch_cart_items()
        return result, seq == self._seq["items"]

    async def sync_items(self) -> Result[list[CartLineItem]]:
        """Refetch the lines and settle the count to their sum."""
        result, fresh = await self._fetch_items()
        if isinstance(result, Ok) and fresh:
            self.apply(result.value)
        return result

    # -------- Lifecycle --------

    async def start(self) -> None:
        """
        Hydrate from storage, then either initialize or, if this cart was
        initialized before, trust the cache and refresh in the background.
        """
        if self._hydrate():
            self.state = CartState.READY
            self.schedule_refresh()
        else:
            await self.initialize()

    async def initialize(self) -> Result[None]:
        """
        Load the cart once. Concurrent callers share the same load.
        """
        if self.state is CartState.READY:
            return Ok(None)
        if self._init_task is None:
            self._init_task = asyncio.create_task(self._load())
            self._init_task.add_done_callback(self._forget_init_task)
        return await asyncio.shield(self._init_task)

    def _forget_init_task(self, task: asyncio.Task) -> None:
        if self._init_task is task:
            self._init_task = None

    async def _load(self) -> Result[None]:
        self.state = CartState.INITIALIZING

        count_result, count_fresh = await self._fetch_count()
        if isinstance(count_result, Err):
            logger.warning("Cart initialization failed: %s", count_result.message)
            self.state = CartState.UNINITIALIZED
            return count_result

        if count_result.value > 0:
            items_result, items_fresh = await self._fetch_items()
            if isinstance(items_result, Err):
                logger.warning("Cart initialization failed: %s", items_result.message)
                self.state = CartState.UNINITIALIZED
                return items_result
            self.state = CartState.READY
            if items_fresh:
                self.apply(items_result.value)
            else:
                self._persist()
        else:
            self.state = CartState.READY
            if count_fresh:
                self.apply([], 0)
            else:
                self._persist()

        logger.debug("Cart initialized with %s items", self._item_count)
        return Ok(None)

    async def refresh(self, show_loading: bool = False) -> Result[None]:
        """
        Overwrite local state with the server's answer.

        A silent refresh (the default) never notifies the user. Skipped
        while a foreground operation is running.
        """
        if self.state is not CartState.READY:
            return await self.initialize()
        if self.is_loading:
            logger.debug("Refresh skipped: foreground operation in progress")
            return Ok(None)

        if show_loading:
            self.is_loading = True
        else:
            self.is_background_fetching = True
        try:
            (count_result, count_fresh), (items_result, items_fresh) = await asyncio.gather(
                self._fetch_count(), self._fetch_items()
            )
        finally:
            if show_loading:
                self.is_loading = False
            else:
                self.is_background_fetching = False

        for result in (count_result, items_result):
            if isinstance(result, Err):
                logger.warning("Cart refresh failed: %s", result.message)
                if show_loading:
                    self.notifier.error(result.message)
                return result

        if not (count_fresh and items_fresh):
            logger.debug("Discarding superseded cart refresh")
            return Ok(None)

        items = items_result.value
        summed = sum(i.quantity for i in items)
        if count_result.value != summed:
            logger.info(
                "Cart count %s disagrees with lines (%s); using lines",
                count_result.value, summed,
            )
        self.apply(items)
        return Ok(None)

    def schedule_refresh(self) -> None:
        """Run a silent refresh in the background."""
        if self._disposed:
            return
        task = asyncio.create_task(self.refresh(show_loading=False))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def wait_idle(self) -> None:
        """Wait for every background task started so far."""
        while self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def dispose(self) -> None:
        """Cancel background work and close the remote. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        tasks = list(self._background)
        if self._init_task is not None:
            tasks.append(self._init_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._background.clear()
        await self.remote.aclose()
