"""Snapshot comparison across poll cycles."""
import logging
from typing import Optional

from .models import MarketSnapshot
from .repository import SnapshotTable


logger = logging.getLogger(__name__)


def should_notify(current: MarketSnapshot, previous: MarketSnapshot) -> bool:
    """Decide whether a new snapshot warrants a notification.

    Args:
        current: Snapshot from this cycle
        previous: Snapshot of the same item from the preceding cycle

    Returns:
        True if more copies are for sale than last cycle and the lowest
        price is at or below the item's threshold (when one is set)
    """
    if current.num_for_sale <= previous.num_for_sale:
        return False

    if current.minimum_price > 0 and current.lowest_price > current.minimum_price:
        return False

    return True


class DiffEngine:
    """Compares each item's snapshot with the one from the previous cycle."""

    def __init__(self, table: Optional[SnapshotTable] = None):
        self.table = table if table is not None else SnapshotTable()

    def observe(self, current: MarketSnapshot) -> bool:
        """Record a snapshot and report whether it should trigger a notification.

        The first observation of an item never notifies. The table is
        updated whatever the outcome, so every decision compares against
        the immediately preceding cycle.
        """
        with self.table.lock:
            previous = self.table.get(current.id)
            notify = previous is not None and should_notify(current, previous)
            self.table.put(current)

        if previous is None:
            logger.debug("First observation of item %s (%s)", current.id, current.name)
        return notify

    def previous(self, item_id: int) -> Optional[MarketSnapshot]:
        return self.table.get(item_id)

    def __len__(self) -> int:
        return len(self.table)
