"""Data records for watch-lists, list items and marketplace snapshots."""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .exceptions import DecodeError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _field(data: Dict[str, Any], key: str, kind: type, default: Any = ...) -> Any:
    """Read a typed field from a decoded JSON object.

    Args:
        data: Decoded JSON object
        key: Key to read
        kind: Expected Python type
        default: Value used when the key is missing or null (required if omitted)

    Returns:
        The field value

    Raises:
        DecodeError: If the key is required and missing, or has the wrong type
    """
    if not isinstance(data, dict):
        raise DecodeError(f"expected an object, got {type(data).__name__}")

    value = data.get(key)
    if value is None:
        if default is ...:
            raise DecodeError(f"missing required field {key!r}")
        return default

    # bool is an int subclass; never accept it where a number is expected
    if kind in (int, float) and isinstance(value, bool):
        raise DecodeError(f"field {key!r} has type bool, expected {kind.__name__}")
    if kind is float and isinstance(value, int):
        return float(value)
    if not isinstance(value, kind):
        raise DecodeError(
            f"field {key!r} has type {type(value).__name__}, expected {kind.__name__}"
        )
    return value


@dataclass
class WatchList:
    """A user list that may be opted into monitoring."""
    id: int
    name: str
    description: str
    resource_url: str
    url: str = ""
    public: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WatchList":
        return cls(
            id=_field(data, "id", int),
            name=_field(data, "name", str, ""),
            description=_field(data, "description", str, ""),
            resource_url=_field(data, "resource_url", str, ""),
            url=_field(data, "uri", str, ""),
            public=_field(data, "public", bool, False),
        )


@dataclass
class ListItem:
    """An entry of a watch-list; its comment may hold a price threshold."""
    id: int
    title: str
    url: str
    comment: str = ""
    resource_url: str = ""
    type: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListItem":
        return cls(
            id=_field(data, "id", int),
            title=_field(data, "display_title", str, ""),
            url=_field(data, "uri", str, ""),
            comment=_field(data, "comment", str, ""),
            resource_url=_field(data, "resource_url", str, ""),
            type=_field(data, "type", str, ""),
        )


@dataclass
class MarketStats:
    """Marketplace statistics for a single release."""
    num_for_sale: int
    lowest_price: float = 0.0
    currency: str = ""
    blocked: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketStats":
        # lowest_price is null when nothing is for sale
        lowest = _field(data, "lowest_price", dict, {})
        return cls(
            num_for_sale=_field(data, "num_for_sale", int, 0),
            lowest_price=_field(lowest, "value", float, 0.0),
            currency=_field(lowest, "currency", str, ""),
            blocked=_field(data, "blocked_from_sale", bool, False),
        )


@dataclass(frozen=True)
class MarketSnapshot:
    """Observed marketplace state of one tracked item at one poll cycle."""
    id: int
    num_for_sale: int
    minimum_price: float
    lowest_price: float
    currency: str
    name: str
    url: str

    @classmethod
    def from_item(
        cls,
        item: ListItem,
        stats: MarketStats,
        minimum_price: float
    ) -> "MarketSnapshot":
        """Combine a list item with its marketplace statistics."""
        return cls(
            id=item.id,
            num_for_sale=stats.num_for_sale,
            minimum_price=minimum_price,
            lowest_price=stats.lowest_price,
            currency=stats.currency,
            name=item.title,
            url=item.url,
        )


@dataclass(frozen=True)
class ListedItem:
    """A single marketplace listing scraped from a release sell page."""
    id: str
    seller: str
    location: str
    price: int
    media_condition: int
    sleeve_condition: int


@dataclass
class Page(Generic[T]):
    """One decoded page of a paginated response."""
    items: List[T] = field(default_factory=list)
    next_url: Optional[str] = None


def list_entries(data: Dict[str, Any], key: str) -> List[Any]:
    """Return the raw array stored under ``key`` (empty when missing)."""
    return _field(data, key, list, [])


def decode_items(
    data: Dict[str, Any],
    key: str,
    factory: Callable[[Dict[str, Any]], T]
) -> List[T]:
    """Decode the array stored under ``key`` with ``factory``.

    Entries that fail to decode are logged and skipped.
    """
    items = []
    for index, entry in enumerate(list_entries(data, key)):
        try:
            items.append(factory(entry))
        except DecodeError as exc:
            logger.warning("Skipping %s entry %d due to %s", key, index, exc)
    return items


def decode_watch_list_page(data: Dict[str, Any]) -> Page[WatchList]:
    """Decode a page of the user lists endpoint."""
    pagination = _field(data, "pagination", dict, {})
    urls = _field(pagination, "urls", dict, {})
    return Page(
        items=decode_items(data, "lists", WatchList.from_dict),
        next_url=_field(urls, "next", str, None) or None,
    )
