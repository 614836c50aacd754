"""Grid occupancy index.

Pure data structure: maps continuous world positions onto integer grid
coordinates and tracks which coordinates are held by live cells. Occupancy
is exact coordinate membership; there are no distance thresholds.
"""

import math
import random
from collections.abc import Iterable, Iterator, Sequence

from pulpit.schemas.types import PRIORITY_ORDER, Direction, GridCoordinate, Position
from pulpit.utils.errors import InvalidConfiguration, OccupiedCoordinateError

WorldPoint = (
    Position | GridCoordinate | tuple[float, float] | tuple[float, float, float]
)


def _round_half_away(value: float) -> int:
    """Round to nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class GridIndex:
    """
    Occupancy index over an unbounded square grid.

    Coordinate system:
    - column = round(x / spacing)
    - row = round(z / spacing)
    - forward is +row, right is +col
    """

    def __init__(self, spacing: float, elevation: float = 0.0):
        if not spacing > 0:
            raise InvalidConfiguration("grid_spacing", spacing, "must be positive")
        self.spacing = float(spacing)
        self.elevation = float(elevation)
        self._occupied: set[GridCoordinate] = set()

    def align(self, point: WorldPoint) -> GridCoordinate:
        """Snap a world position to the nearest grid coordinate.

        A ``GridCoordinate`` is already aligned and is returned unchanged.
        Two-element tuples are read as (x, z); three-element as (x, y, z).
        """
        if isinstance(point, GridCoordinate):
            return point
        if len(point) == 2:
            x, z = point
        else:
            x, _, z = point
        return GridCoordinate(
            _round_half_away(x / self.spacing), _round_half_away(z / self.spacing)
        )

    def center_of(self, coord: GridCoordinate, elevation: float = 0.0) -> Position:
        """World-space center of ``coord``, raised by ``elevation``."""
        return Position(
            coord.col * self.spacing,
            self.elevation + elevation,
            coord.row * self.spacing,
        )

    def is_occupied(self, coord: GridCoordinate) -> bool:
        return coord in self._occupied

    def occupy(self, coord: GridCoordinate) -> None:
        """Mark ``coord`` as held by a live cell."""
        if coord in self._occupied:
            raise OccupiedCoordinateError(coord)
        self._occupied.add(coord)

    def release(self, coord: GridCoordinate) -> bool:
        """Free ``coord``. Returns False if it was not occupied."""
        if coord not in self._occupied:
            return False
        self._occupied.discard(coord)
        return True

    def clear(self) -> None:
        self._occupied.clear()

    def neighbors(
        self,
        coord: GridCoordinate,
        order: Sequence[Direction] = PRIORITY_ORDER,
    ) -> Iterator[tuple[Direction, GridCoordinate]]:
        """Yield (direction, neighbor) pairs in the given direction order."""
        for direction in order:
            yield direction, coord.offset(*direction.delta())

    def first_free_neighbor(
        self,
        coord: GridCoordinate,
        order: Sequence[Direction] = PRIORITY_ORDER,
    ) -> GridCoordinate | None:
        """Return the first unoccupied neighbor of ``coord`` or None."""
        for _, candidate in self.neighbors(coord, order):
            if candidate not in self._occupied:
                return candidate
        return None

    @property
    def occupied(self) -> frozenset[GridCoordinate]:
        return frozenset(self._occupied)

    def __len__(self) -> int:
        return len(self._occupied)

    def __contains__(self, coord: object) -> bool:
        return coord in self._occupied

    def __repr__(self) -> str:
        return f"GridIndex(spacing={self.spacing}, occupied={len(self._occupied)})"


def shuffled_order(
    rng: random.Random, directions: Iterable[Direction] = PRIORITY_ORDER
) -> list[Direction]:
    """Return a per-call random permutation of ``directions``."""
    order = list(directions)
    rng.shuffle(order)
    return order
