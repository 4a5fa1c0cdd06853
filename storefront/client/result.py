"""
Outcome values returned by every client-side cart and wishlist operation.

Callers branch on `isinstance(result, Ok)`; nothing in the client raises
into UI code.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class CartErrorKind(str, Enum):
    AUTH = "auth"
    VALIDATION = "validation"
    STOCK_CONFLICT = "stock_conflict"
    NOT_FOUND = "not_found"
    BUSY = "busy"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class CartError:
    kind: CartErrorKind
    message: str


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: CartError

    @property
    def kind(self) -> CartErrorKind:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message


Result = Union[Ok[T], Err]


def err(kind: CartErrorKind, message: str) -> Err:
    return Err(CartError(kind, message))


def kind_for_status(status_code: int) -> CartErrorKind:
    """Map an HTTP status from the storefront API to an error kind."""
    if status_code in (401, 403):
        return CartErrorKind.AUTH
    if status_code == 409:
        return CartErrorKind.STOCK_CONFLICT
    if status_code == 404:
        return CartErrorKind.NOT_FOUND
    if status_code in (400, 422):
        return CartErrorKind.VALIDATION
    return CartErrorKind.TRANSIENT
