"""
Tests: wishlist

- /api/v1/wishlist endpoints (idempotent add, toggle, status)
- WishlistStore (client) lookups, toggling and persistence
"""

import uuid
from unittest.mock import MagicMock

import pytest

from storefront.client.result import CartErrorKind, Err, Ok, err
from storefront.client.storage import MemoryStorage
from storefront.client.wishlist_store import STORAGE_SLOT, WishlistStore
from tests.fakes import FakeWishlistRemote

WISHLIST = "/api/v1/wishlist"


class TestWishlistApi:

    def test_add_is_idempotent(self, client, customer, catalog, auth_headers):
        headers = auth_headers(customer)

        first = client.post(f"{WISHLIST}/{catalog.a.id}", headers=headers)
        second = client.post(f"{WISHLIST}/{catalog.a.id}", headers=headers)
        items = client.get(WISHLIST, headers=headers).json()["wishlist_items"]

        assert first.json()["message"] == "Item added to your wishlist"
        assert second.json()["message"] == "Item is already in your wishlist"
        assert [i["variation_id"] for i in items] == [str(catalog.a.id)]
        assert items[0]["variation"]["product"]["product_name"] == "Linen Shirt"

    def test_toggle(self, client, customer, catalog, auth_headers):
        headers = auth_headers(customer)
        url = f"{WISHLIST}/{catalog.b.id}"

        on = client.post(f"{url}/toggle", headers=headers).json()
        status_on = client.get(url, headers=headers).json()["is_in_wishlist"]
        off = client.post(f"{url}/toggle", headers=headers).json()
        status_off = client.get(url, headers=headers).json()["is_in_wishlist"]

        assert on["added"] is True and status_on is True
        assert off["added"] is False and status_off is False

    def test_remove(self, client, customer, catalog, auth_headers):
        headers = auth_headers(customer)
        client.post(f"{WISHLIST}/{catalog.a.id}", headers=headers)

        response = client.delete(f"{WISHLIST}/{catalog.a.id}", headers=headers)

        assert response.json()["message"] == "Item removed from your wishlist"
        assert client.get(WISHLIST, headers=headers).json()["wishlist_items"] == []

    def test_unknown_variation(self, client, customer, auth_headers):
        response = client.post(f"{WISHLIST}/{uuid.uuid4()}", headers=auth_headers(customer))

        assert response.status_code == 404

    def test_guest(self, client):
        assert client.get(WISHLIST).status_code == 401


class TestWishlistStore:

    @pytest.mark.asyncio
    async def test_fetch_builds_lookup(self):
        saved = uuid.uuid4()
        store = WishlistStore(FakeWishlistRemote([saved]), MemoryStorage(), MagicMock())

        result = await store.fetch()

        assert isinstance(result, Ok)
        assert store.is_in_wishlist(saved)
        assert not store.is_in_wishlist(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_toggle_adds_then_removes(self):
        variation_id = uuid.uuid4()
        remote = FakeWishlistRemote()
        notifier = MagicMock()
        store = WishlistStore(remote, MemoryStorage(), notifier)

        added = await store.toggle(variation_id)
        assert added == Ok(True)
        assert store.is_in_wishlist(variation_id)
        assert [i.variation_id for i in store.wishlist_items] == [variation_id]

        removed = await store.toggle(variation_id)
        assert removed == Ok(False)
        assert not store.is_in_wishlist(variation_id)
        assert store.wishlist_items == []
        assert remote.calls["add"] == 1 and remote.calls["remove"] == 1
        notifier.success.assert_called_with("Item removed from your wishlist")

    @pytest.mark.asyncio
    async def test_ids_persist_as_list_and_reload_as_set(self):
        storage = MemoryStorage()
        first, second = uuid.uuid4(), uuid.uuid4()
        store = WishlistStore(FakeWishlistRemote([first, second]), storage, MagicMock())
        await store.fetch()

        persisted = storage.slots[STORAGE_SLOT]["variation_ids"]
        reloaded = WishlistStore(FakeWishlistRemote(), storage, MagicMock())

        assert isinstance(persisted, list)
        assert sorted(persisted) == sorted([str(first), str(second)])
        assert reloaded.variation_ids == {first, second}

    @pytest.mark.asyncio
    async def test_failed_remove_keeps_item(self):
        saved = uuid.uuid4()
        remote = FakeWishlistRemote([saved])
        notifier = MagicMock()
        store = WishlistStore(remote, MemoryStorage(), notifier)
        await store.fetch()
        remote.fail_always["remove"] = err(CartErrorKind.TRANSIENT, "Network error, please try again")

        result = await store.remove(saved)

        assert isinstance(result, Err)
        assert store.is_in_wishlist(saved)
        notifier.error.assert_called_once_with("Network error, please try again")

    @pytest.mark.asyncio
    async def test_guest_cannot_save(self):
        remote = FakeWishlistRemote(authenticated=False)
        store = WishlistStore(remote, MemoryStorage(), MagicMock())

        result = await store.add(uuid.uuid4())

        assert isinstance(result, Err)
        assert result.kind is CartErrorKind.AUTH
        assert remote.calls["add"] == 0
