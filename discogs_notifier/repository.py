"""In-memory store of the last observed snapshot per tracked item."""
import threading
from typing import Dict, Iterator, Optional

from .models import MarketSnapshot


class SnapshotTable:
    """Repository for the most recent marketplace snapshot of each item.

    State lives for the lifetime of the process only. An item id that is
    absent from the table has never been observed.
    """

    def __init__(self):
        self._snapshots: Dict[int, MarketSnapshot] = {}
        self.lock = threading.RLock()

    def get(self, item_id: int) -> Optional[MarketSnapshot]:
        """Return the previous snapshot of an item, or None if never seen."""
        with self.lock:
            return self._snapshots.get(item_id)

    def put(self, snapshot: MarketSnapshot) -> None:
        """Record a snapshot, replacing any earlier one for the same item."""
        with self.lock:
            self._snapshots[snapshot.id] = snapshot

    def clear(self) -> None:
        """Forget every item."""
        with self.lock:
            self._snapshots.clear()

    def __contains__(self, item_id: object) -> bool:
        with self.lock:
            return item_id in self._snapshots

    def __len__(self) -> int:
        with self.lock:
            return len(self._snapshots)

    def __iter__(self) -> Iterator[int]:
        with self.lock:
            return iter(list(self._snapshots))
