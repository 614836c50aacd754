"""
Keyed timed queue driven by simulation time.

This module provides a priority queue of delayed items that are released when
an externally advanced clock passes their due time. Entries are keyed so a
pending item can be looked up or cancelled before it fires.
"""

import heapq
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class _QueueItem:
    """Internal queue item with due time and sequence for ordering."""

    due_at: float
    sequence: int
    key: Hashable = field(compare=False)
    item: Any = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def __lt__(self, other: "_QueueItem") -> bool:
        """Compare items for heap ordering: earlier time first, then sequence."""
        if self.due_at != other.due_at:
            return self.due_at < other.due_at
        return self.sequence < other.sequence


class SimTimedQueue:
    """
    Priority queue of keyed items released by simulation time.

    At most one live entry exists per key. Cancellation marks the heap entry
    and drops the key immediately, so a cancelled item can never be
    released even though it stays in the heap until popped.
    """

    def __init__(self) -> None:
        """Initialize empty timed queue."""
        self._heap: list[_QueueItem] = []
        self._live: dict[Hashable, _QueueItem] = {}
        self._sequence_counter: int = 0

    def put_at(self, due_at: float, key: Hashable, item: Any) -> bool:
        """
        Schedule item for release at a specific simulation time.

        Args:
            due_at: Simulation time when the item becomes due
            key: Deduplication key
            item: Item to release

        Returns:
            False if an entry for ``key`` is already pending, True otherwise
        """
        if key in self._live:
            return False

        self._sequence_counter += 1
        queue_item = _QueueItem(
            due_at=due_at, sequence=self._sequence_counter, key=key, item=item
        )
        heapq.heappush(self._heap, queue_item)
        self._live[key] = queue_item
        return True

    def pop_due(self, now: float) -> list[Any]:
        """
        Remove and return every item due at or before ``now``.

        Items are returned in (due time, insertion order) order.
        """
        released = []
        while self._heap and self._heap[0].due_at <= now:
            queue_item = heapq.heappop(self._heap)
            if queue_item.cancelled:
                continue
            del self._live[queue_item.key]
            released.append(queue_item.item)
        return released

    def get(self, key: Hashable) -> Any | None:
        """Return the pending item for ``key`` or None."""
        queue_item = self._live.get(key)
        return queue_item.item if queue_item else None

    def cancel(self, key: Hashable) -> bool:
        """Cancel the pending entry for ``key``. Returns True if one existed."""
        queue_item = self._live.pop(key, None)
        if queue_item is None:
            return False
        queue_item.cancelled = True
        return True

    def clear(self) -> int:
        """Cancel every pending entry and return how many were dropped."""
        dropped = len(self._live)
        for queue_item in self._live.values():
            queue_item.cancelled = True
        self._live.clear()
        self._heap.clear()
        return dropped

    def items(self) -> list[Any]:
        """Return pending items ordered by due time."""
        return [q.item for q in sorted(self._live.values())]

    def __contains__(self, key: Hashable) -> bool:
        return key in self._live

    def qsize(self) -> int:
        """Return the number of pending (non-cancelled) entries."""
        return len(self._live)

    def empty(self) -> bool:
        """Return True if nothing is pending."""
        return not self._live

    def peek_next_due_time(self) -> float | None:
        """
        Get the due time of the next live item without removing it.

        Returns:
            Due time of next item, or None if nothing is pending
        """
        while self._heap and self._heap[0].cancelled:
            heapq.heappop(self._heap)
        if not self._heap:
            return None
        return self._heap[0].due_at
