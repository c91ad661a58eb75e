"""Main poll loop orchestrator."""
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from .diff import DiffEngine
from .dispatcher import NotificationDispatcher
from .exceptions import FatalCycleError, NotifierError
from .listings import ListingFetcher
from .models import ListItem, WatchList


logger = logging.getLogger(__name__)


@dataclass
class CycleStats:
    """Counters for a single poll cycle."""
    lists: int = 0
    items: int = 0
    skipped: int = 0
    notified: int = 0


class ListingWatcher:
    """Orchestrates the watch-list polling workflow.

    Cycles run back to back without sleeping; every API call goes through
    the client's rate limiter, which is the only throttle.
    """

    def __init__(
        self,
        fetcher: ListingFetcher,
        diff_engine: DiffEngine,
        dispatcher: NotificationDispatcher,
        username: str,
        retry_attempts: int = 3,
        retry_backoff: float = 5.0,
        stop_event: Optional[threading.Event] = None
    ):
        """Initialize the watcher.

        Args:
            fetcher: Fetcher for lists, items and marketplace stats
            diff_engine: Engine holding the previous snapshot of each item
            dispatcher: Dispatcher delivering notifications in the background
            username: Discogs user whose lists are watched
            retry_attempts: Tries at fetching the watch-lists before giving up
            retry_backoff: Base delay in seconds between those tries
            stop_event: Event that ends the loop when set; also cuts retry waits short
        """
        self.fetcher = fetcher
        self.diff_engine = diff_engine
        self.dispatcher = dispatcher
        self.username = username
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff = retry_backoff
        self.stop_event = stop_event or threading.Event()

    def stop(self) -> None:
        """Ask the loop to stop at the next item boundary."""
        self.stop_event.set()

    def run_forever(self) -> None:
        """Run poll cycles until stopped.

        Raises:
            FatalCycleError: If the watch-lists cannot be fetched
        """
        logger.info("Running notifier for '%s'", self.username)
        while not self.stop_event.is_set():
            self.run_cycle()
        logger.info("Notifier stopped")

    def run_cycle(self) -> CycleStats:
        """Run a single poll over every watched list.

        Returns:
            Counters for the cycle

        Raises:
            FatalCycleError: If the watch-lists cannot be fetched
        """
        stats = CycleStats()
        watch_lists = self._fetch_watch_lists()
        stats.lists = len(watch_lists)

        for watch_list in watch_lists:
            if self.stop_event.is_set():
                break
            self._poll_list(watch_list, stats)

        logger.debug(
            "Cycle finished: %d lists, %d items, %d skipped, %d notified",
            stats.lists, stats.items, stats.skipped, stats.notified
        )
        return stats

    def _fetch_watch_lists(self) -> List[WatchList]:
        """Fetch the watched lists, retrying with exponential backoff."""
        for attempt in range(self.retry_attempts):
            try:
                return self.fetcher.watch_lists(self.username)
            except NotifierError as exc:
                if attempt + 1 >= self.retry_attempts:
                    raise FatalCycleError(
                        f"unable to fetch lists for '{self.username}' "
                        f"after {self.retry_attempts} attempts"
                    ) from exc
                delay = self.retry_backoff * 2 ** attempt
                logger.warning(
                    "Error getting lists for %s due to %s, retrying in %.0fs",
                    self.username, exc, delay
                )
                if self.stop_event.wait(delay):
                    logger.info("Stopped while waiting to retry")
                    return []
        return []

    def _poll_list(self, watch_list: WatchList, stats: CycleStats) -> None:
        logger.debug("Fetching list '%s'", watch_list.name)
        try:
            items = self.fetcher.items_of(watch_list)
        except NotifierError as exc:
            logger.error(
                "Error getting list items for %s due to %s", watch_list.name, exc
            )
            stats.skipped += 1
            return

        for item in items:
            if self.stop_event.is_set():
                return
            self._poll_item(watch_list, item, stats)

    def _poll_item(self, watch_list: WatchList, item: ListItem, stats: CycleStats) -> None:
        logger.debug("Fetching item '%s'", item.title)
        try:
            snapshot = self.fetcher.market_stats_of(item)
        except NotifierError as exc:
            logger.error(
                "Error getting market stats for %s in list %s due to %s",
                item.title, watch_list.name, exc
            )
            stats.skipped += 1
            return

        stats.items += 1
        if self.diff_engine.observe(snapshot):
            self.dispatcher.submit(snapshot)
            stats.notified += 1

        logger.debug("Updated market item %s", snapshot)
