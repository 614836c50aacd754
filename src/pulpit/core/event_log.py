"""Append-only record of lifecycle events and spawn outcomes.

The orchestrator appends one entry per cell creation, lifecycle event, spawn
outcome and reset. The log spans sessions so a host can inspect what happened
across a retry; entries carry the session number they belong to.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from pulpit.utils.telemetry import MonotonicClock, get_logger

EntryKind = Literal[
    "CellCreated",
    "EarlyWarning",
    "Expired",
    "SpawnOutcome",
    "Reset",
]


class EventLogEntry(BaseModel):
    """Single entry in the event log."""

    seq: int = Field(..., description="Monotonically increasing sequence number")
    session: int = Field(..., description="Orchestrator session number", ge=0)
    sim_time: float = Field(..., description="Simulation time of the frame")
    wall_time: float = Field(..., description="Wall clock time when logged")
    kind: EntryKind
    coord: tuple[int, int] | None = Field(
        default=None, description="Coordinate the entry is about"
    )
    origin: tuple[int, int] | None = Field(
        default=None, description="Origin coordinate of a spawn request"
    )
    cell_id: int | None = None
    outcome: str | None = Field(default=None, description="SpawnOutcome value")
    details: dict[str, Any] = Field(default_factory=dict)


class EventLog:
    """Append-only in-memory event log.

    Examples
    --------
    >>> log = EventLog()
    >>> log.append("Reset", session=1, sim_time=0.0)
    1
    >>> [e.kind for e in log.get_entries_since(0)]
    ['Reset']
    """

    def __init__(self, max_entries: int | None = None) -> None:
        """Initialize empty event log.

        Args:
            max_entries: Keep only the newest entries when set
        """
        self.max_entries = max_entries
        self._entries: list[EventLogEntry] = []
        self._seq_counter: int = 0
        self._logger = get_logger("pulpit.event_log")

    def append(
        self,
        kind: EntryKind,
        session: int,
        sim_time: float,
        coord: tuple[int, int] | None = None,
        origin: tuple[int, int] | None = None,
        cell_id: int | None = None,
        outcome: str | None = None,
        **details: Any,
    ) -> int:
        """Append an entry and return its sequence number."""
        self._seq_counter += 1
        entry = EventLogEntry(
            seq=self._seq_counter,
            session=session,
            sim_time=sim_time,
            wall_time=MonotonicClock.wall_time(),
            kind=kind,
            coord=tuple(coord) if coord is not None else None,
            origin=tuple(origin) if origin is not None else None,
            cell_id=cell_id,
            outcome=outcome,
            details=details,
        )
        self._entries.append(entry)

        if self.max_entries is not None and len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]

        self._logger.debug(
            "event_logged",
            seq=entry.seq,
            kind=kind,
            coord=entry.coord,
            outcome=outcome,
        )
        return entry.seq

    def get_entries_since(self, since_seq: int) -> list[EventLogEntry]:
        """Return entries with seq > since_seq in order."""
        return [entry for entry in self._entries if entry.seq > since_seq]

    def get_entries(
        self, kind: EntryKind | None = None, session: int | None = None
    ) -> list[EventLogEntry]:
        """Return entries filtered by kind and/or session."""
        return [
            entry
            for entry in self._entries
            if (kind is None or entry.kind == kind)
            and (session is None or entry.session == session)
        ]

    def outcomes(self, session: int | None = None) -> list[str]:
        """Spawn outcome values in order."""
        return [
            entry.outcome
            for entry in self.get_entries("SpawnOutcome", session)
            if entry.outcome is not None
        ]

    def get_latest_seq(self) -> int:
        return self._seq_counter

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
