"""Core type definitions for grid coordinates, cell events and spawn outcomes."""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, NamedTuple, TypedDict


class GridCoordinate(NamedTuple):
    """Discrete (column, row) grid position. Equality and hashing by value."""

    col: int
    row: int

    def offset(self, dcol: int, drow: int) -> "GridCoordinate":
        """Return the coordinate shifted by (dcol, drow)."""
        return GridCoordinate(self.col + dcol, self.row + drow)

    def __str__(self) -> str:
        return f"({self.col},{self.row})"


class Position(NamedTuple):
    """Continuous world position. x maps to columns, z to rows, y is elevation."""

    x: float
    y: float
    z: float


class Direction(Enum):
    """Neighbor directions relative to the canonical axis (+row is forward)."""

    FORWARD = "forward"
    RIGHT = "right"
    LEFT = "left"
    BACK = "back"

    def delta(self) -> tuple[int, int]:
        """Return (dcol, drow) for this direction."""
        deltas = {
            Direction.FORWARD: (0, 1),
            Direction.RIGHT: (1, 0),
            Direction.LEFT: (-1, 0),
            Direction.BACK: (0, -1),
        }
        return deltas[self]

    def opposite(self) -> "Direction":
        """Return the opposite direction."""
        opposites = {
            Direction.FORWARD: Direction.BACK,
            Direction.BACK: Direction.FORWARD,
            Direction.LEFT: Direction.RIGHT,
            Direction.RIGHT: Direction.LEFT,
        }
        return opposites[self]


# Fixed neighbor search priority
PRIORITY_ORDER: tuple[Direction, ...] = (
    Direction.FORWARD,
    Direction.RIGHT,
    Direction.LEFT,
    Direction.BACK,
)


class CellState(Enum):
    """Lifecycle states of a cell."""

    PENDING = "pending"
    LIVE = "live"
    EXPIRING = "expiring"
    DESTROYED = "destroyed"


class CellEvent(TypedDict):
    """Event emitted by a cell countdown.

    Cells never touch shared state; the orchestrator queues these events and
    drains them once per frame.
    """

    kind: Annotated[
        Literal["EarlyWarning", "Expired"], "Lifecycle threshold that was crossed"
    ]
    coord: Annotated[GridCoordinate, "Grid coordinate of the emitting cell"]
    cell_id: Annotated[int, "Identifier of the emitting cell"]
    sim_time: Annotated[float, "Simulation time of the frame that crossed it"]


class SpawnOutcome(Enum):
    """Normal (non-exceptional) results of spawn requests and attempts."""

    SCHEDULED = "scheduled"
    DUPLICATE_SUPPRESSED = "duplicate_suppressed"
    MATERIALIZED = "materialized"
    ADMISSION_REJECTED = "admission_rejected"
    NO_FREE_SLOT = "no_free_slot"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SpawnResult:
    """Outcome of an attempt to place a cell."""

    outcome: SpawnOutcome
    origin: GridCoordinate | None
    coord: GridCoordinate | None = None
    cell_id: int | None = None

    @property
    def spawned(self) -> bool:
        return self.outcome is SpawnOutcome.MATERIALIZED
