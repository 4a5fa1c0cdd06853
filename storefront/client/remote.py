"""
HTTP collaborators for the client-side stores.

`CartRemote` is what `CartStore` needs from the server; `HttpCartRemote`
implements it against the storefront API with httpx. Every call returns
a Result: HTTP failures are mapped to error kinds, transport failures
are TRANSIENT.
"""
import logging
import uuid
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from storefront.client.result import CartErrorKind, Ok, Result, err, kind_for_status
from storefront.schemas.cart import (
    CartClearRead,
    CartCountRead,
    CartItemsRead,
    CartLineItem,
    CartMutationRead,
)
from storefront.schemas.wishlist import (
    WishlistActionRead,
    WishlistItemRead,
    WishlistRead,
)

logger = logging.getLogger(__name__)


class CartRemote(Protocol):
    @property
    def authenticated(self) -> bool: ...

    async def fetch_cart_item_count(self) -> Result[int]: ...

    async def fetch_cart_items(self) -> Result[list[CartLineItem]]: ...

    async def add_cart_item(
        self, variation_id: uuid.UUID, quantity: int
    ) -> Result[CartMutationRead]: ...

    async def update_cart_item(
        self, line_item_id: uuid.UUID, quantity: int
    ) -> Result[CartMutationRead]: ...

    async def clear_cart(self) -> Result[CartClearRead]: ...

    async def aclose(self) -> None: ...


class WishlistRemote(Protocol):
    @property
    def authenticated(self) -> bool: ...

    async def fetch_wishlist(self) -> Result[list[WishlistItemRead]]: ...

    async def add_to_wishlist(self, variation_id: uuid.UUID) -> Result[WishlistActionRead]: ...

    async def remove_from_wishlist(
        self, variation_id: uuid.UUID
    ) -> Result[WishlistActionRead]: ...

    async def aclose(self) -> None: ...


def _error_message(response: httpx.Response) -> str:
    """
    Pull a readable message out of a FastAPI error body.

    `detail` is a string for HTTPException, a dict for structured errors
    (e.g. checkout validation) and a list for 422s.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict) and "message" in detail:
        return str(detail["message"])
    if isinstance(detail, list) and detail:
        first = detail[0]
        if isinstance(first, dict) and "msg" in first:
            return str(first["msg"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class _ApiClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Result[dict[str, Any]]:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return err(CartErrorKind.TRANSIENT, "Network error, please try again")

        if response.is_error:
            kind = kind_for_status(response.status_code)
            message = _error_message(response)
            logger.info("%s %s -> %s %s", method, path, response.status_code, message)
            return err(kind, message)

        try:
            return Ok(response.json())
        except ValueError:
            return err(CartErrorKind.TRANSIENT, "Unexpected response from server")

    async def _parse(self, method: str, path: str, model, json: dict[str, Any] | None = None):
        result = await self._request(method, path, json)
        if not isinstance(result, Ok):
            return result
        try:
            return Ok(model.model_validate(result.value))
        except ValidationError as e:
            logger.warning("%s %s returned an invalid body: %s", method, path, e)
            return err(CartErrorKind.TRANSIENT, "Unexpected response from server")


class HttpCartRemote(_ApiClient):
    async def fetch_cart_item_count(self) -> Result[int]:
        result = await self._parse("GET", "/cart/count", CartCountRead)
        return Ok(result.value.cart_item_count) if isinstance(result, Ok) else result

    async def fetch_cart_items(self) -> Result[list[CartLineItem]]:
        result = await self._parse("GET", "/cart/items", CartItemsRead)
        return Ok(result.value.items) if isinstance(result, Ok) else result

    async def add_cart_item(
        self, variation_id: uuid.UUID, quantity: int
    ) -> Result[CartMutationRead]:
        return await self._parse(
            "POST",
            "/cart/items",
            CartMutationRead,
            json={"variation_id": str(variation_id), "quantity": quantity},
        )

    async def update_cart_item(
        self, line_item_id: uuid.UUID, quantity: int
    ) -> Result[CartMutationRead]:
        return await self._parse(
            "PATCH",
            f"/cart/items/{line_item_id}",
            CartMutationRead,
            json={"quantity": quantity},
        )

    async def clear_cart(self) -> Result[CartClearRead]:
        return await self._parse("DELETE", "/cart", CartClearRead)


class HttpWishlistRemote(_ApiClient):
    async def fetch_wishlist(self) -> Result[list[WishlistItemRead]]:
        result = await self._parse("GET", "/wishlist", WishlistRead)
        return Ok(result.value.wishlist_items) if isinstance(result, Ok) else result

    async def add_to_wishlist(self, variation_id: uuid.UUID) -> Result[WishlistActionRead]:
        return await self._parse("POST", f"/wishlist/{variation_id}", WishlistActionRead)

    async def remove_from_wishlist(
        self, variation_id: uuid.UUID
    ) -> Result[WishlistActionRead]:
        return await self._parse("DELETE", f"/wishlist/{variation_id}", WishlistActionRead)
