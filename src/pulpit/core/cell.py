"""Per-cell countdown state machine.

A cell counts its remaining lifetime down as frames advance. It emits an
``EarlyWarning`` event the first time the remaining lifetime drops to the
warning fraction of its total, and an ``Expired`` event when it reaches zero.
Cells never touch shared state; the orchestrator collects the returned events.
"""

import math
import random
from dataclasses import dataclass

from pulpit.schemas.types import CellEvent, CellState, GridCoordinate
from pulpit.utils.errors import InvalidConfiguration, InvalidInput

EARLY_WARNING_FRACTION = 0.6


def validate_lifetime_range(min_lifetime: float, max_lifetime: float) -> None:
    """Raise InvalidConfiguration unless 0 < min_lifetime <= max_lifetime."""
    if not min_lifetime > 0:
        raise InvalidConfiguration("min_lifetime", min_lifetime, "must be positive")
    if not max_lifetime > 0:
        raise InvalidConfiguration("max_lifetime", max_lifetime, "must be positive")
    if max_lifetime < min_lifetime:
        raise InvalidConfiguration(
            "max_lifetime",
            max_lifetime,
            f"must be >= min_lifetime ({min_lifetime})",
        )


@dataclass
class Cell:
    """One live platform occupying a grid coordinate."""

    cell_id: int
    coord: GridCoordinate
    total_lifetime: float
    remaining: float
    warning_fired: bool = False
    state: CellState = CellState.PENDING

    @classmethod
    def create(
        cls,
        coord: GridCoordinate,
        min_lifetime: float,
        max_lifetime: float,
        rng: random.Random,
        cell_id: int,
    ) -> "Cell":
        """Draw a lifetime in [min_lifetime, max_lifetime) and start counting.

        Equal bounds are accepted and give every cell exactly ``min_lifetime``,
        matching the game's own behavior, even though the half-open interval
        is empty in that case.

        Raises:
            InvalidConfiguration: If the lifetime range is not positive
        """
        validate_lifetime_range(min_lifetime, max_lifetime)

        if max_lifetime == min_lifetime:
            lifetime = min_lifetime
        else:
            lifetime = min_lifetime + rng.random() * (max_lifetime - min_lifetime)

        cell = cls(
            cell_id=cell_id,
            coord=coord,
            total_lifetime=lifetime,
            remaining=lifetime,
        )
        cell.state = CellState.LIVE
        return cell

    @property
    def warning_threshold(self) -> float:
        return self.total_lifetime * EARLY_WARNING_FRACTION

    @property
    def is_destroyed(self) -> bool:
        return self.state is CellState.DESTROYED

    def tick(self, dt: float, now: float = 0.0) -> list[CellEvent]:
        """Advance the countdown by ``dt`` seconds.

        Args:
            dt: Elapsed seconds, must be non-negative
            now: Simulation time stamped on emitted events

        Returns:
            Events crossed during this tick, warning before expiry

        Raises:
            InvalidInput: If dt is negative or not finite; the cell is left
                unchanged
        """
        if not math.isfinite(dt):
            raise InvalidInput("dt", dt, "must be a finite number of seconds")
        if dt < 0:
            raise InvalidInput("dt", dt, "time cannot run backwards")
        if self.state is CellState.DESTROYED:
            return []

        events: list[CellEvent] = []
        self.remaining -= dt

        if not self.warning_fired and self.remaining <= self.warning_threshold:
            self.warning_fired = True
            self.state = CellState.EXPIRING
            events.append(self._event("EarlyWarning", now))

        if self.remaining <= 0:
            self.remaining = 0.0
            self.state = CellState.DESTROYED
            events.append(self._event("Expired", now))

        return events

    def destroy(self) -> None:
        """Force the terminal state without emitting events (used by reset)."""
        self.state = CellState.DESTROYED

    def _event(self, kind: str, now: float) -> CellEvent:
        return {
            "kind": kind,  # type: ignore[typeddict-item]
            "coord": self.coord,
            "cell_id": self.cell_id,
            "sim_time": now,
        }
