"""
Unit Tests: CartStore

- single-flight initialize, silent initialization failures
- refresh overwrites local state; stale responses are dropped
- persistence in the "cart-storage" slot and start()
- getters and tier totals
"""

import asyncio
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from storefront.client.cart_store import STORAGE_SLOT, CartState, CartStore
from storefront.client.result import CartErrorKind, Err, Ok, err
from storefront.client.storage import JsonFileStorage, MemoryStorage
from tests.fakes import FakeCartRemote, make_line

OFFLINE = err(CartErrorKind.TRANSIENT, "Network error, please try again")


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def storage():
    return MemoryStorage()


class TestInitialize:

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_load(self, storage, notifier):
        remote = FakeCartRemote([make_line(100, 2), make_line(50, 1)])
        store = CartStore(remote, storage, notifier)

        results = await asyncio.gather(*(store.initialize() for _ in range(5)))

        assert all(r == Ok(None) for r in results)
        assert remote.calls["count"] == 1
        assert remote.calls["items"] == 1
        assert store.state is CartState.READY
        assert store.item_count == 3

    @pytest.mark.asyncio
    async def test_ready_store_does_not_reload(self, storage, notifier):
        remote = FakeCartRemote([make_line(10, 1)])
        store = CartStore(remote, storage, notifier)
        await store.initialize()

        await store.initialize()

        assert remote.calls["count"] == 1

    @pytest.mark.asyncio
    async def test_empty_cart_skips_items_fetch(self, storage, notifier):
        remote = FakeCartRemote()
        store = CartStore(remote, storage, notifier)

        await store.initialize()

        assert remote.calls["items"] == 0
        assert store.is_ready
        assert store.is_empty

    @pytest.mark.asyncio
    async def test_failure_is_silent_and_retryable(self, storage, notifier):
        remote = FakeCartRemote([make_line(10, 4)])
        remote.fail_once["count"] = OFFLINE
        store = CartStore(remote, storage, notifier)

        failed = await store.initialize()

        assert isinstance(failed, Err)
        assert store.state is CartState.UNINITIALIZED
        assert store.items == []
        notifier.error.assert_not_called()

        await store.initialize()

        assert store.is_ready
        assert store.item_count == 4


class TestRefresh:

    @pytest.mark.asyncio
    async def test_refresh_overwrites_with_server_state(self, storage, notifier):
        line = make_line(20, 1)
        remote = FakeCartRemote([line])
        store = CartStore(remote, storage, notifier)
        await store.initialize()
        remote.lines = [line.model_copy(update={"quantity": 3}), make_line(5, 2)]

        result = await store.refresh()

        assert result == Ok(None)
        assert [i.quantity for i in store.items] == [3, 2]
        assert store.item_count == 5

    @pytest.mark.asyncio
    async def test_silent_refresh_failure_keeps_state(self, storage, notifier):
        remote = FakeCartRemote([make_line(20, 2)])
        store = CartStore(remote, storage, notifier)
        await store.initialize()
        remote.fail_once["items"] = OFFLINE

        result = await store.refresh()

        assert isinstance(result, Err)
        assert store.item_count == 2
        notifier.error.assert_not_called()

    @pytest.mark.asyncio
    async def test_foreground_refresh_failure_notifies(self, storage, notifier):
        remote = FakeCartRemote([make_line(20, 2)])
        store = CartStore(remote, storage, notifier)
        await store.initialize()
        remote.fail_once["count"] = OFFLINE

        await store.refresh(show_loading=True)

        notifier.error.assert_called_once_with("Network error, please try again")
        assert not store.is_loading

    @pytest.mark.asyncio
    async def test_refresh_skipped_during_foreground_work(self, storage, notifier):
        remote = FakeCartRemote([make_line(20, 2)])
        store = CartStore(remote, storage, notifier)
        await store.initialize()

        with store.foreground():
            await store.refresh()

        assert remote.calls["count"] == 1

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self, storage, notifier):
        line = make_line(10, 1)
        remote = FakeCartRemote([line])
        store = CartStore(remote, storage, notifier)
        await store.initialize()

        gate = asyncio.Event()
        remote.hold_next("items", gate)
        slow = asyncio.create_task(store.refresh())
        while remote.calls["items"] < 2:
            await asyncio.sleep(0)

        remote.lines = [line.model_copy(update={"quantity": 3})]
        await store.refresh()
        gate.set()
        await slow

        assert store.items[0].quantity == 3
        assert store.item_count == 3


class TestGetters:

    @pytest.mark.asyncio
    async def test_total_price_and_tier_totals(self, storage, notifier):
        store = CartStore(FakeCartRemote([make_line(100, 2), make_line(50, 1)]), storage, notifier)
        await store.initialize()

        totals = store.totals("SILVER")

        assert store.total_price == Decimal("250.00")
        assert totals.discount_amount == Decimal("12.50")
        assert totals.discounted_subtotal == Decimal("237.50")

    def test_items_are_a_copy(self, storage, notifier):
        store = CartStore(FakeCartRemote(), storage, notifier)
        store.apply([make_line(10, 1)])

        store.items.clear()

        assert len(store.items) == 1

    def test_apply_writes_items_and_count_together(self, storage, notifier):
        store = CartStore(FakeCartRemote(), storage, notifier)

        store.apply([make_line(10, 2), make_line(10, 3)])

        assert store.item_count == 5
        assert storage.slots[STORAGE_SLOT]["item_count"] == 5
        assert len(storage.slots[STORAGE_SLOT]["items"]) == 2


class TestPersistence:

    @pytest.mark.asyncio
    async def test_initialized_cart_is_persisted(self, storage, notifier):
        store = CartStore(FakeCartRemote([make_line(30, 2)]), storage, notifier)

        await store.initialize()

        slot = storage.slots[STORAGE_SLOT]
        assert slot["is_initialized"] is True
        assert slot["item_count"] == 2
        assert slot["last_updated"] is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("lines", [[make_line(30, 2)], []])
    async def test_initialize_writes_the_slot_once(self, storage, notifier, lines):
        storage.save = MagicMock(wraps=storage.save)
        store = CartStore(FakeCartRemote(lines), storage, notifier)

        await store.initialize()

        storage.save.assert_called_once()
        assert storage.slots[STORAGE_SLOT]["is_initialized"] is True

    @pytest.mark.asyncio
    async def test_start_trusts_cache_and_refreshes_in_background(self, storage, notifier):
        line = make_line(30, 2)
        await CartStore(FakeCartRemote([line]), storage, notifier).initialize()

        remote = FakeCartRemote([line.model_copy(update={"quantity": 5})])
        store = CartStore(remote, storage, notifier)
        await store.start()

        assert store.is_ready
        assert store.item_count == 2

        await store.wait_idle()

        assert store.item_count == 5
        assert remote.calls["items"] == 1

    @pytest.mark.asyncio
    async def test_start_without_cache_initializes(self, storage, notifier):
        remote = FakeCartRemote([make_line(30, 1)])
        store = CartStore(remote, storage, notifier)

        await store.start()

        assert store.is_ready
        assert store.item_count == 1
        assert remote.calls["count"] == 1

    @pytest.mark.asyncio
    async def test_corrupt_cache_is_ignored(self, storage, notifier):
        storage.save(STORAGE_SLOT, {"items": "nope", "item_count": "many"})
        remote = FakeCartRemote()
        store = CartStore(remote, storage, notifier)

        await store.start()

        assert store.is_ready
        assert remote.calls["count"] == 1

    @pytest.mark.asyncio
    async def test_json_file_storage(self, tmp_path, notifier):
        storage = JsonFileStorage(tmp_path / "cache")
        await CartStore(FakeCartRemote([make_line(12.5, 2)]), storage, notifier).initialize()

        reloaded = CartStore(FakeCartRemote(), JsonFileStorage(tmp_path / "cache"), notifier)
        await reloaded.start()

        assert (tmp_path / "cache" / "cart-storage.json").exists()
        assert reloaded.items[0].variation.price == 12.5
        await reloaded.dispose()

    def test_unreadable_file_loads_as_nothing(self, tmp_path):
        (tmp_path / "cart-storage.json").write_text("{not json")

        assert JsonFileStorage(tmp_path).load(STORAGE_SLOT) is None


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_dispose_cancels_background_work(self, storage, notifier):
        remote = FakeCartRemote([make_line(10, 1)])
        store = CartStore(remote, storage, notifier)
        await store.initialize()
        remote.hold_next("count", asyncio.Event())

        store.schedule_refresh()
        await asyncio.sleep(0)
        await store.dispose()

        assert store._background == set()
        store.schedule_refresh()
        assert store._background == set()
        assert remote.closed

    @pytest.mark.asyncio
    async def test_dispose_before_start_closes_remote(self, storage, notifier):
        remote = FakeCartRemote()

        await CartStore(remote, storage, notifier).dispose()

        assert remote.closed
        assert remote.calls["count"] == 0
