"""
Unit Tests: HttpCartRemote / HttpWishlistRemote

Uses httpx.MockTransport to stand in for the storefront API.
"""

import json
import uuid

import httpx
import pytest

from storefront.client.config import CartClientSettings
from storefront.client.factory import build_cart, build_wishlist
from storefront.client.remote import HttpCartRemote, HttpWishlistRemote
from storefront.client.result import CartErrorKind, Err, Ok, kind_for_status
from tests.fakes import make_line

BASE = "http://shop.test/api/v1"


def _remote(handler, token="tok"):
    return HttpCartRemote(BASE, token=token, transport=httpx.MockTransport(handler))


class TestStatusMapping:

    @pytest.mark.parametrize(
        "status, kind",
        [
            (401, CartErrorKind.AUTH),
            (403, CartErrorKind.AUTH),
            (409, CartErrorKind.STOCK_CONFLICT),
            (404, CartErrorKind.NOT_FOUND),
            (400, CartErrorKind.VALIDATION),
            (422, CartErrorKind.VALIDATION),
            (500, CartErrorKind.TRANSIENT),
            (503, CartErrorKind.TRANSIENT),
        ],
    )
    def test_kind_for_status(self, status, kind):
        assert kind_for_status(status) is kind


class TestCartRemote:

    @pytest.mark.asyncio
    async def test_count_sends_bearer_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["path"] = request.url.path
            return httpx.Response(200, json={"success": True, "cart_item_count": 3})

        async with _remote(handler) as remote:
            result = await remote.fetch_cart_item_count()

        assert result == Ok(3)
        assert seen == {"auth": "Bearer tok", "path": "/api/v1/cart/count"}

    @pytest.mark.asyncio
    async def test_items_are_parsed(self):
        line = make_line(19.99, 2)

        def handler(request):
            body = {"success": True, "items": [line.model_dump(mode="json")]}
            return httpx.Response(200, json=body)

        async with _remote(handler) as remote:
            result = await remote.fetch_cart_items()

        assert isinstance(result, Ok)
        assert [i.model_dump() for i in result.value] == [line.model_dump()]

    @pytest.mark.asyncio
    async def test_add_posts_payload(self):
        variation_id = uuid.uuid4()
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"success": True, "message": "Item added to cart successfully", "cart_item_count": 2},
            )

        async with _remote(handler) as remote:
            result = await remote.add_cart_item(variation_id, 2)

        assert seen == {
            "method": "POST",
            "body": {"variation_id": str(variation_id), "quantity": 2},
        }
        assert result.value.cart_item_count == 2

    @pytest.mark.asyncio
    async def test_update_and_clear_paths(self):
        line_id = uuid.uuid4()
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            if request.method == "DELETE":
                return httpx.Response(200, json={"success": True, "message": "Cart cleared successfully"})
            return httpx.Response(200, json={"success": True, "message": "Item removed from cart", "cart_item_count": 0})

        async with _remote(handler) as remote:
            updated = await remote.update_cart_item(line_id, 0)
            cleared = await remote.clear_cart()

        assert seen == [("PATCH", f"/api/v1/cart/items/{line_id}"), ("DELETE", "/api/v1/cart")]
        assert updated.value.message == "Item removed from cart"
        assert cleared.value.message == "Cart cleared successfully"

    @pytest.mark.asyncio
    async def test_conflict_message_is_kept(self):
        def handler(request):
            return httpx.Response(409, json={"detail": "Only 2 items available in stock"})

        async with _remote(handler) as remote:
            result = await remote.add_cart_item(uuid.uuid4(), 5)

        assert isinstance(result, Err)
        assert result.kind is CartErrorKind.STOCK_CONFLICT
        assert result.message == "Only 2 items available in stock"

    @pytest.mark.asyncio
    async def test_validation_error_list(self):
        def handler(request):
            detail = [{"loc": ["body", "quantity"], "msg": "Input should be greater than 0"}]
            return httpx.Response(422, json={"detail": detail})

        async with _remote(handler) as remote:
            result = await remote.add_cart_item(uuid.uuid4(), 0)

        assert result.kind is CartErrorKind.VALIDATION
        assert result.message == "Input should be greater than 0"

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        def handler(request):
            return httpx.Response(401, json={"detail": "You must be logged in to continue"})

        async with _remote(handler, token=None) as remote:
            assert not remote.authenticated
            result = await remote.fetch_cart_items()

        assert result.kind is CartErrorKind.AUTH

    @pytest.mark.asyncio
    async def test_transport_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _remote(handler) as remote:
            result = await remote.fetch_cart_item_count()

        assert result.kind is CartErrorKind.TRANSIENT

    @pytest.mark.asyncio
    async def test_unexpected_body_is_transient(self):
        def handler(request):
            return httpx.Response(200, json={"success": True})

        async with _remote(handler) as remote:
            result = await remote.fetch_cart_item_count()

        assert result.kind is CartErrorKind.TRANSIENT

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        async with _remote(handler) as remote:
            result = await remote.clear_cart()

        assert result.kind is CartErrorKind.TRANSIENT


class TestWishlistRemote:

    @pytest.mark.asyncio
    async def test_toggle_paths(self):
        variation_id = uuid.uuid4()
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            if request.method == "GET":
                return httpx.Response(200, json={"success": True, "wishlist_items": []})
            return httpx.Response(200, json={"success": True, "message": "ok"})

        remote = HttpWishlistRemote(BASE, token="tok", transport=httpx.MockTransport(handler))
        await remote.add_to_wishlist(variation_id)
        await remote.remove_from_wishlist(variation_id)
        fetched = await remote.fetch_wishlist()
        await remote.aclose()

        assert seen == [
            ("POST", f"/api/v1/wishlist/{variation_id}"),
            ("DELETE", f"/api/v1/wishlist/{variation_id}"),
            ("GET", "/api/v1/wishlist"),
        ]
        assert fetched == Ok([])


class TestFactory:

    @pytest.mark.asyncio
    async def test_build_cart_uses_settings(self, tmp_path):
        line = make_line(25, 2)

        def handler(request):
            if request.url.path.endswith("/cart/count"):
                return httpx.Response(200, json={"success": True, "cart_item_count": 2})
            return httpx.Response(200, json={"success": True, "items": [line.model_dump(mode="json")]})

        settings = CartClientSettings(API_BASE_URL=BASE, CACHE_DIR=tmp_path, TIMEOUT=2.0)
        store, actions = build_cart("tok", settings, transport=httpx.MockTransport(handler))

        await store.start()

        assert actions.store is store
        assert store.item_count == 2
        assert (tmp_path / "cart-storage.json").exists()
        await store.dispose()
        assert store.remote._client.is_closed

    @pytest.mark.asyncio
    async def test_build_wishlist(self, tmp_path):
        settings = CartClientSettings(API_BASE_URL=BASE, CACHE_DIR=tmp_path)

        store = build_wishlist(None, settings)

        assert not store.remote.authenticated
        assert store.variation_ids == set()
        await store.dispose()
        assert store.remote._client.is_closed

    @pytest.mark.asyncio
    async def test_dispose_closes_default_client(self, tmp_path):
        store, _ = build_cart("tok", CartClientSettings(CACHE_DIR=tmp_path))

        await store.dispose()
        await store.dispose()

        assert store.remote._client.is_closed

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("CART_CLIENT_API_BASE_URL", "https://api.example.com/api/v1")
        monkeypatch.setenv("CART_CLIENT_TIMEOUT", "3.5")

        settings = CartClientSettings()

        assert settings.API_BASE_URL == "https://api.example.com/api/v1"
        assert settings.TIMEOUT == 3.5
