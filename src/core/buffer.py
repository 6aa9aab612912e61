"""Bounded per-session event buffer."""

from __future__ import annotations

from typing import Hashable, Iterator, Optional

from core.config import DEFAULT_CAPACITY
from core.models import FilteringEvent


class EventBuffer:
    """Ordered event history with a fixed capacity.

    Overflow evicts the second-oldest record. The first record is the request
    for the main frame and anchors the session history, so it is never evicted.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"Buffer capacity must be positive: {capacity}")
        self._capacity = capacity
        self._records: list[FilteringEvent] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, record: FilteringEvent) -> Optional[FilteringEvent]:
        """Append ``record`` and return the evicted record, if any."""

        self._records.append(record)
        if len(self._records) > self._capacity:
            return self._records.pop(1)
        return None

    def find_latest(self, event_id: Hashable) -> Optional[FilteringEvent]:
        """Return the most recently appended record carrying ``event_id``."""

        # Element and cookie records have no correlation id.
        if event_id is None:
            return None
        for record in reversed(self._records):
            if record.event_id == event_id:
                return record
        return None

    def clear(self) -> None:
        self._records.clear()

    def records(self) -> list[FilteringEvent]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FilteringEvent]:
        return iter(list(self._records))
