"""Cursor-based pagination over Eventline collection endpoints."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, List, Optional, TypeVar

from eventline_provider.core import validators
from .exceptions import DecodeError, ValidationError

if TYPE_CHECKING:
    from .client import EventlineClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20


class Order(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Cursor:
    """Position in a collection, as exchanged with the API."""

    size: int = DEFAULT_PAGE_SIZE
    before: Optional[str] = None
    after: Optional[str] = None
    sort: Optional[str] = None
    order: Optional[Order] = None

    def __post_init__(self):
        if self.size < 1:
            raise ValidationError(f"invalid cursor size {self.size}")
        if self.order is not None and not isinstance(self.order, Order):
            object.__setattr__(self, "order", validators.parse_enum(Order, self.order, "order"))

    def with_sort(self, sort: str, allowed: List[str]) -> "Cursor":
        """Return a copy sorted by ``sort``, which must be one of ``allowed``."""
        if sort not in allowed:
            raise ValidationError(
                f"unknown sort {sort!r} (expected one of: {', '.join(allowed)})"
            )
        return replace(self, sort=sort)

    def query(self) -> Dict[str, str]:
        params = {"size": str(self.size)}
        if self.before is not None:
            params["before"] = self.before
        if self.after is not None:
            params["after"] = self.after
        if self.sort is not None:
            params["sort"] = self.sort
        if self.order is not None:
            params["order"] = self.order.value
        return params

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cursor":
        return cls(
            size=data.get("size", DEFAULT_PAGE_SIZE),
            before=data.get("before"),
            after=data.get("after"),
            sort=data.get("sort"),
            order=data.get("order"),
        )


@dataclass
class Page(Generic[T]):
    """One page of a collection."""

    elements: List[T] = field(default_factory=list)
    previous: Optional[Cursor] = None
    next: Optional[Cursor] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], decode: Callable[[Dict[str, Any]], T]) -> "Page[T]":
        if not isinstance(data, dict):
            raise DecodeError("cannot decode page: expected a JSON object")
        previous = data.get("previous")
        next_cursor = data.get("next")
        return cls(
            elements=[decode(element) for element in data.get("elements") or []],
            previous=Cursor.from_dict(previous) if previous else None,
            next=Cursor.from_dict(next_cursor) if next_cursor else None,
        )


def fetch_page(
    client: "EventlineClient",
    path: str,
    decode: Callable[[Dict[str, Any]], T],
    cursor: Cursor,
) -> Page[T]:
    """Fetch a single page of ``path`` at ``cursor``."""
    data = client.get(path, query=cursor.query())
    return Page.from_dict(data, decode)


def fetch_all(
    client: "EventlineClient",
    path: str,
    decode: Callable[[Dict[str, Any]], T],
    cursor: Optional[Cursor] = None,
) -> List[T]:
    """Walk every page of a collection and return all elements in server order.

    Pages are requested one after the other. Any error aborts the walk and
    nothing collected so far is returned.

    Args:
        client: Client (scope-bound where the collection is project-scoped)
        path: Collection path (e.g. "/projects")
        decode: Converts one JSON element into a model
        cursor: Starting cursor (default: first page of 20 elements)

    Returns:
        Concatenation of every page's elements
    """
    cursor = cursor or Cursor()
    elements: List[T] = []
    pages = 0

    while True:
        page = fetch_page(client, path, decode, cursor)
        pages += 1
        elements.extend(page.elements)

        if page.next is None:
            break
        if page.next == cursor:
            raise DecodeError(f"pagination of {path} did not advance past page {pages}")
        cursor = page.next

    logger.debug("Fetched %d element(s) from %s in %d page(s)", len(elements), path, pages)
    return elements
