"""Delayed neighbor spawning with per-origin deduplication.

The scheduler holds at most one pending spawn per origin coordinate. When a
pending spawn comes due it re-validates admission against the *current*
active count, searches the origin's neighbors for a free coordinate, and asks
its host to create a cell there. Every exit path removes the pending entry.
"""

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

from pulpit.core.grid import GridIndex, shuffled_order
from pulpit.schemas.types import (
    PRIORITY_ORDER,
    Direction,
    GridCoordinate,
    SpawnOutcome,
    SpawnResult,
)
from pulpit.utils.errors import InvalidConfiguration
from pulpit.utils.telemetry import (
    get_logger,
    record_spawn_outcome,
    update_pending_spawns,
)
from pulpit.utils.timing import SimTimedQueue

NeighborOrder = Literal["fixed", "shuffled"]


class SpawnHost(Protocol):
    """What the scheduler needs from its owner."""

    grid: GridIndex

    @property
    def active_count(self) -> int: ...

    @property
    def max_active_cells(self) -> int: ...

    def spawn_cell(self, coord: GridCoordinate, reason: str = ...) -> SpawnResult: ...


@dataclass(frozen=True)
class PendingSpawn:
    """A scheduled spawn that has not fired yet."""

    origin: GridCoordinate
    requested_at: float
    due_at: float
    session: int

    def time_remaining(self, now: float) -> float:
        return max(0.0, self.due_at - now)


class SpawnScheduler:
    """Schedules, deduplicates and materializes neighbor spawns.

    Examples
    --------
    >>> scheduler = SpawnScheduler(host, spawn_interval=2.5)
    >>> scheduler.request_spawn(GridCoordinate(0, 0), now=3.0)
    <SpawnOutcome.SCHEDULED: 'scheduled'>
    >>> scheduler.request_spawn(GridCoordinate(0, 0), now=3.1)
    <SpawnOutcome.DUPLICATE_SUPPRESSED: 'duplicate_suppressed'>
    >>> scheduler.run_due(now=5.5)
    [SpawnResult(outcome=<SpawnOutcome.MATERIALIZED: ...>, ...)]
    """

    def __init__(
        self,
        host: SpawnHost,
        spawn_interval: float,
        neighbor_order: NeighborOrder = "fixed",
        rng: random.Random | None = None,
        session: int = 0,
    ):
        _check_parameters(spawn_interval, neighbor_order)

        self.host = host
        self.spawn_interval = float(spawn_interval)
        self.neighbor_order = neighbor_order
        self.rng = rng or random.Random()
        self.session = session
        self._queue = SimTimedQueue()
        self._logger = get_logger("pulpit.spawn_scheduler")

    def start_session(
        self,
        session: int,
        spawn_interval: float | None = None,
        neighbor_order: NeighborOrder | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Switch to ``session``, optionally with new parameters.

        Entries still queued from an earlier session are never fired. They
        are dropped when they come due or when the same origin is requested
        again.

        Raises:
            InvalidConfiguration: If the new parameters are invalid; nothing
                changes
        """
        interval = self.spawn_interval if spawn_interval is None else spawn_interval
        order = self.neighbor_order if neighbor_order is None else neighbor_order
        _check_parameters(interval, order)

        self.spawn_interval = float(interval)
        self.neighbor_order = order
        if rng is not None:
            self.rng = rng
        self.session = session
        self._logger.debug("scheduler_session_started", session=session)

    def request_spawn(self, origin: GridCoordinate, now: float) -> SpawnOutcome:
        """Schedule a neighbor spawn for ``origin`` unless one is already pending."""
        queued = self._queue.get(origin)
        if queued is not None and queued.session != self.session:
            self._queue.cancel(origin)

        pending = PendingSpawn(
            origin=origin,
            requested_at=now,
            due_at=now + self.spawn_interval,
            session=self.session,
        )
        if not self._queue.put_at(pending.due_at, origin, pending):
            self._logger.debug(
                "spawn_already_scheduled", origin=str(origin), session=self.session
            )
            record_spawn_outcome(SpawnOutcome.DUPLICATE_SUPPRESSED.value)
            return SpawnOutcome.DUPLICATE_SUPPRESSED

        update_pending_spawns(self._queue.qsize())
        record_spawn_outcome(SpawnOutcome.SCHEDULED.value)
        self._logger.info(
            "spawn_scheduled",
            origin=str(origin),
            due_at=round(pending.due_at, 6),
            session=self.session,
        )
        return SpawnOutcome.SCHEDULED

    def run_due(self, now: float) -> list[SpawnResult]:
        """Fire every pending spawn due at or before ``now``, earliest first."""
        results = []
        for pending in self._queue.pop_due(now):
            if pending.session != self.session:
                self._logger.debug(
                    "stale_spawn_dropped",
                    origin=str(pending.origin),
                    session=pending.session,
                )
                continue
            results.append(self.try_materialize(pending.origin))
        if results:
            update_pending_spawns(self._queue.qsize())
        return results

    def try_materialize(self, origin: GridCoordinate) -> SpawnResult:
        """Attempt to place a cell next to ``origin`` right now.

        Admission is checked against the current active count, not the count
        at request time. The pending entry for ``origin`` is always removed.
        """
        self._queue.cancel(origin)

        active = self.host.active_count
        if active >= self.host.max_active_cells:
            self._logger.info(
                "delayed_spawn_aborted",
                origin=str(origin),
                active_count=active,
                max_active_cells=self.host.max_active_cells,
            )
            return self._finish(SpawnResult(SpawnOutcome.ADMISSION_REJECTED, origin))

        candidate = self.host.grid.first_free_neighbor(origin, self.candidate_order())
        if candidate is None:
            self._logger.info("delayed_spawn_no_free_slot", origin=str(origin))
            return self._finish(SpawnResult(SpawnOutcome.NO_FREE_SLOT, origin))

        placed = self.host.spawn_cell(candidate, reason="scheduled")
        result = SpawnResult(placed.outcome, origin, placed.coord, placed.cell_id)
        if result.spawned:
            self._logger.info(
                "delayed_spawn_executed",
                origin=str(origin),
                coord=str(candidate),
                cell_id=result.cell_id,
            )
        return self._finish(result)

    def candidate_order(self) -> Sequence[Direction]:
        """Neighbor search order for one attempt."""
        if self.neighbor_order == "shuffled":
            return shuffled_order(self.rng)
        return PRIORITY_ORDER

    def cancel_all(self) -> int:
        """Cancel every pending spawn. Returns how many were dropped."""
        dropped = self._queue.clear()
        for _ in range(dropped):
            record_spawn_outcome(SpawnOutcome.CANCELLED.value)
        update_pending_spawns(0)
        if dropped:
            self._logger.info("pending_spawns_cancelled", count=dropped)
        return dropped

    def has_pending(self, origin: GridCoordinate) -> bool:
        queued = self._queue.get(origin)
        return queued is not None and queued.session == self.session

    def pending(self) -> list[PendingSpawn]:
        """Pending spawns of the current session ordered by due time."""
        return [p for p in self._queue.items() if p.session == self.session]

    @property
    def pending_count(self) -> int:
        return len(self.pending())

    def _finish(self, result: SpawnResult) -> SpawnResult:
        record_spawn_outcome(result.outcome.value)
        return result


def _check_parameters(spawn_interval: float, neighbor_order: str) -> None:
    if not spawn_interval > 0:
        raise InvalidConfiguration("spawn_interval", spawn_interval, "must be positive")
    if neighbor_order not in ("fixed", "shuffled"):
        raise InvalidConfiguration(
            "neighbor_order", neighbor_order, "must be 'fixed' or 'shuffled'"
        )
