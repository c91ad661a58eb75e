"""Watch-list selection and per-item marketplace lookups."""
import logging
import math
from typing import Iterable, List, Optional

from .client import DiscogsClient, walk_all
from .exceptions import DecodeError, ThresholdParseError
from .models import (
    ListItem,
    MarketSnapshot,
    MarketStats,
    WatchList,
    decode_watch_list_page,
    list_entries,
)


logger = logging.getLogger(__name__)

NOTIFY_TAG = "notify_me"


def filter_watch_lists(
    lists: Iterable[WatchList],
    marker: str = NOTIFY_TAG
) -> List[WatchList]:
    """Keep the lists whose description contains the opt-in marker."""
    return [wl for wl in lists if wl.description and marker in wl.description]


def parse_comment(comment: Optional[str]) -> float:
    """Parse a list item comment into a minimum price threshold.

    Args:
        comment: Free-text comment of the list item

    Returns:
        The threshold, or 0.0 when the comment is empty (no threshold)

    Raises:
        ThresholdParseError: If the comment is not a single number
    """
    if comment is None or not comment.strip():
        return 0.0

    # float() also accepts digit separators such as "1_000"
    if "_" in comment:
        raise ThresholdParseError(f"comment {comment!r} is not a price")

    try:
        value = float(comment.strip())
    except ValueError as exc:
        raise ThresholdParseError(f"comment {comment!r} is not a price") from exc

    if not math.isfinite(value):
        raise ThresholdParseError(f"comment {comment!r} is not a price")
    return value


class ListingFetcher:
    """Retrieves watch-lists, their items and item marketplace stats."""

    def __init__(
        self,
        client: DiscogsClient,
        api_base_url: str = "https://api.discogs.com",
        currency: str = "",
        notify_tag: str = NOTIFY_TAG
    ):
        """Initialize the fetcher.

        Args:
            client: Authenticated Discogs client
            api_base_url: Base URL of the Discogs API
            currency: Currency abbreviation for marketplace prices (optional)
            notify_tag: Marker a list description must contain to be watched
        """
        self.client = client
        self.api_base_url = api_base_url.rstrip("/")
        self.currency = currency
        self.notify_tag = notify_tag

    @property
    def stats_url_prefix(self) -> str:
        return f"{self.api_base_url}/marketplace/stats/"

    def user_lists_url(self, username: str) -> str:
        return f"{self.api_base_url}/users/{username}/lists"

    def watch_lists(self, username: str) -> List[WatchList]:
        """Fetch every list of the user and keep the opted-in ones."""
        lists = walk_all(
            self.client.fetch,
            self.user_lists_url(username),
            decode_watch_list_page,
        )
        watched = filter_watch_lists(lists, self.notify_tag)
        logger.debug("%d of %d lists are watched", len(watched), len(lists))
        return watched

    def items_of(self, watch_list: WatchList) -> List[ListItem]:
        """Fetch the items of a list.

        List contents are returned in a single response; they are not
        walked for further pages. Entries that fail to decode are logged
        and skipped so the rest of the list is still polled.

        Raises:
            TransportError: If the list request fails
            DecodeError: If the list has no resource URL or the response is not an object
        """
        if not watch_list.resource_url:
            raise DecodeError(f"list {watch_list.name!r} has no resource_url")

        data = self.client.fetch(watch_list.resource_url)
        items = []
        for index, entry in enumerate(list_entries(data, "items")):
            try:
                items.append(ListItem.from_dict(entry))
            except DecodeError as exc:
                title = entry.get("display_title") if isinstance(entry, dict) else None
                logger.warning(
                    "Skipping entry %d (%r) of list %s due to %s",
                    index, title, watch_list.name, exc
                )
        return items

    def market_stats_of(self, item: ListItem) -> MarketSnapshot:
        """Fetch marketplace stats for an item and build its snapshot.

        Raises:
            TransportError: If the stats request fails
            DecodeError: If the stats response is malformed
            ThresholdParseError: If the item comment is not a price
        """
        params = {"curr_abbr": self.currency} if self.currency else None
        data = self.client.fetch(f"{self.stats_url_prefix}{item.id}", params)
        stats = MarketStats.from_dict(data)
        minimum_price = parse_comment(item.comment)
        return MarketSnapshot.from_item(item, stats, minimum_price)
