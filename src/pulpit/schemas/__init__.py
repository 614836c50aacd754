"""Data models and type definitions for the pulpit scheduling core."""

from .messages import CellView, PendingSpawnView, PlayerPlacement, WorldSnapshot
from .types import (
    PRIORITY_ORDER,
    CellEvent,
    CellState,
    Direction,
    GridCoordinate,
    Position,
    SpawnOutcome,
    SpawnResult,
)

__all__ = [
    "PRIORITY_ORDER",
    "CellEvent",
    "CellState",
    "CellView",
    "Direction",
    "GridCoordinate",
    "PendingSpawnView",
    "PlayerPlacement",
    "Position",
    "SpawnOutcome",
    "SpawnResult",
    "WorldSnapshot",
]
