"""Core orchestrator for the platform scheduler.

This module provides the Orchestrator that owns every live cell and every
pending spawn, enforces the ceiling on live cells, routes lifecycle events to
the spawn scheduler, and exposes player placement and full reset.

Frame order inside ``advance(dt)``:

1. simulation time moves forward by ``dt``
2. live cells tick in creation order; their events are queued
3. the queue is drained FIFO (early warnings schedule spawns, expiries
   release cells and may trigger a corrective spawn)
4. due pending spawns fire in (due time, request order) order
"""

import itertools
import math
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from pulpit.config.settings import GameSettings, validate_settings
from pulpit.core.cell import Cell
from pulpit.core.event_log import EventLog
from pulpit.core.grid import GridIndex, WorldPoint
from pulpit.core.spawn_scheduler import PendingSpawn, SpawnScheduler
from pulpit.schemas.messages import (
    CellView,
    PendingSpawnView,
    PlayerPlacement,
    WorldSnapshot,
)
from pulpit.schemas.types import (
    PRIORITY_ORDER,
    CellEvent,
    Direction,
    GridCoordinate,
    Position,
    SpawnOutcome,
    SpawnResult,
)
from pulpit.utils.errors import InvalidConfiguration, InvalidInput, NotRunningError
from pulpit.utils.telemetry import (
    PerformanceTimer,
    get_logger,
    record_cell_expired,
    record_cell_spawned,
    record_session_reset,
    record_spawn_outcome,
    update_active_cells,
)

DEFAULT_EVENT_LOG_SIZE = 10_000


class OrchestratorState(Enum):
    """Whole-system state."""

    UNINITIALIZED = "uninitialized"
    RUNNING = "running"


@dataclass
class FrameReport:
    """What happened during one ``advance`` call."""

    sim_time: float
    events: list[CellEvent] = field(default_factory=list)
    spawns: list[SpawnResult] = field(default_factory=list)

    def outcomes(self) -> list[SpawnOutcome]:
        return [result.outcome for result in self.spawns]


class Orchestrator:
    """Owner of the active set, grid occupancy and pending spawns.

    Invariants while running:
    - the number of live cells never exceeds ``max_active_cells``
    - no two live cells share a grid coordinate
    - at most one pending spawn exists per origin coordinate

    Examples
    --------
    >>> orchestrator = Orchestrator(GameSettings(seed=7))
    >>> orchestrator.initialize(origin=(0.0, 0.0, 0.0))
    >>> report = orchestrator.advance(1 / 60)
    >>> orchestrator.snapshot().active_count
    1
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        event_log: EventLog | None = None,
        rng: random.Random | None = None,
    ):
        """Initialize orchestrator without starting a session.

        Args:
            settings: Game parameters (defaults if None)
            event_log: Shared event log (a private one capped at
                ``DEFAULT_EVENT_LOG_SIZE`` entries if None)
            rng: Random source for lifetimes and shuffled neighbor order;
                seeded from ``settings.seed`` per session when None
        """
        self.settings = settings or GameSettings()
        self.event_log = (
            event_log
            if event_log is not None
            else EventLog(max_entries=DEFAULT_EVENT_LOG_SIZE)
        )
        self._injected_rng = rng

        self.state = OrchestratorState.UNINITIALIZED
        self.session: int = 0
        self.sim_time: float = 0.0
        self.grid: GridIndex | None = None
        self.scheduler: SpawnScheduler | None = None
        self.origin_coord: GridCoordinate | None = None

        self._cells: dict[GridCoordinate, Cell] = {}
        self._events: deque[CellEvent] = deque()
        self._frame_spawns: list[SpawnResult] = []
        self._cell_ids = itertools.count(1)
        self._rng: random.Random = rng or random.Random(self.settings.seed)
        self._floor: int = self.settings.initial_fill_count
        self._player_position: Position | None = None

        # initialize() arguments, replayed by reset()
        self._origin_arg: WorldPoint | None = None
        self._fill_arg: int | None = None

        self._logger = get_logger("pulpit.orchestrator", session=self.session)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.state is OrchestratorState.RUNNING

    def initialize(
        self,
        origin: WorldPoint | None = None,
        initial_fill_count: int | None = None,
    ) -> None:
        """Start a session: place the base cell, the player, and the initial fill.

        Args:
            origin: World position of the base cell (``settings.origin`` if None)
            initial_fill_count: Cells to place immediately, clamped to
                [1, max_active_cells]; also the refill floor

        Raises:
            InvalidConfiguration: If settings or fill count are invalid; the
                orchestrator stays uninitialized
            InvalidInput: If ``origin`` is not finite; nothing changes
        """
        if self.is_running:
            self._logger.debug("initialize_ignored_already_running")
            return

        settings = self.settings
        validate_settings(settings)
        fill = (
            settings.initial_fill_count
            if initial_fill_count is None
            else initial_fill_count
        )
        if fill < 1:
            raise InvalidConfiguration("initial_fill_count", fill, "must be at least 1")

        origin_point = settings.origin if origin is None else origin
        if not all(math.isfinite(v) for v in origin_point):
            raise InvalidInput("origin", origin, "must be finite")

        self._origin_arg = origin
        self._fill_arg = initial_fill_count

        if self._injected_rng is None:
            self._rng = random.Random(settings.seed)
        self.grid = GridIndex(
            settings.grid_spacing, elevation=_elevation_of(origin_point)
        )
        if self.scheduler is None:
            self.scheduler = SpawnScheduler(
                self,
                spawn_interval=settings.spawn_interval,
                neighbor_order=settings.neighbor_order,
                rng=self._rng,
                session=self.session,
            )
        else:
            self.scheduler.start_session(
                self.session,
                spawn_interval=settings.spawn_interval,
                neighbor_order=settings.neighbor_order,
                rng=self._rng,
            )
        self.sim_time = 0.0
        self._floor = min(fill, settings.max_active_cells)
        self._logger = get_logger("pulpit.orchestrator", session=self.session)

        self.origin_coord = self.grid.align(origin_point)
        self.state = OrchestratorState.RUNNING

        self.spawn_cell(self.origin_coord, reason="initial")
        self._place_player(self.origin_coord)

        to_spawn = min(max(fill, 1), settings.max_active_cells)
        for _ in range(to_spawn - 1):
            self._spawn_adjacent(self.origin_coord, PRIORITY_ORDER, reason="initial")

        self._logger.info(
            "session_started",
            origin=str(self.origin_coord),
            grid_spacing=settings.grid_spacing,
            max_active_cells=settings.max_active_cells,
            initial_fill_count=fill,
            spawn_interval=settings.spawn_interval,
            active_count=self.active_count,
        )

    def reset(self, settings: GameSettings | None = None) -> None:
        """Tear the session down and start a fresh one.

        Every live cell is destroyed and every pending spawn is cancelled
        before ``initialize`` runs again with the original arguments, so no
        spawn scheduled in the old session can materialize in the new one.

        Args:
            settings: Replacement parameters for the new session

        Raises:
            InvalidConfiguration: If the new parameters are invalid; the
                orchestrator is left uninitialized
        """
        destroyed = len(self._cells)
        for cell in self._cells.values():
            cell.destroy()
        self._cells.clear()
        if self.grid is not None:
            self.grid.clear()
        cancelled = self.scheduler.cancel_all() if self.scheduler is not None else 0
        self._events.clear()
        self._frame_spawns = []
        self._player_position = None

        self.event_log.append(
            "Reset",
            session=self.session,
            sim_time=self.sim_time,
            destroyed=destroyed,
            cancelled=cancelled,
        )
        self._logger.info(
            "session_reset", destroyed=destroyed, cancelled_spawns=cancelled
        )

        self.state = OrchestratorState.UNINITIALIZED
        self.session += 1
        record_session_reset()
        update_active_cells(0)

        if settings is not None:
            self.settings = settings

        self.initialize(self._origin_arg, self._fill_arg)

    # ------------------------------------------------------------------
    # Frame advance
    # ------------------------------------------------------------------

    def advance(self, dt: float) -> FrameReport:
        """Advance every countdown and pending spawn by ``dt`` seconds.

        Raises:
            NotRunningError: If called before initialize()
            InvalidInput: If dt is negative or not finite; nothing changes
        """
        if not self.is_running:
            raise NotRunningError("advance")
        if not math.isfinite(dt):
            raise InvalidInput("dt", dt, "must be a finite number of seconds")
        if dt < 0:
            raise InvalidInput("dt", dt, "time cannot run backwards")

        with PerformanceTimer("advance", logger=self._logger, session=self.session):
            self.sim_time += dt
            self._frame_spawns = []
            report = FrameReport(sim_time=self.sim_time)

            for cell in list(self._cells.values()):
                events = cell.tick(dt, self.sim_time)
                self._events.extend(events)
                report.events.extend(events)

            self._drain_events()

            for result in self.scheduler.run_due(self.sim_time):
                self._record_outcome(result, already_counted=True)

            report.spawns = self._frame_spawns
            self._frame_spawns = []
            return report

    def _drain_events(self) -> None:
        while self._events:
            event = self._events.popleft()
            self.event_log.append(
                event["kind"],
                session=self.session,
                sim_time=event["sim_time"],
                coord=event["coord"],
                cell_id=event["cell_id"],
            )
            if event["kind"] == "EarlyWarning":
                self.on_early_warning(event["coord"])
            else:
                self.on_expired(event["coord"], event["cell_id"])

    # ------------------------------------------------------------------
    # Lifecycle event handlers
    # ------------------------------------------------------------------

    def on_early_warning(self, coord: GridCoordinate) -> SpawnOutcome:
        """Schedule a neighbor spawn for ``coord`` (deduplicated by origin)."""
        if not self.is_running:
            raise NotRunningError("schedule a spawn")

        outcome = self.scheduler.request_spawn(coord, self.sim_time)
        self.event_log.append(
            "SpawnOutcome",
            session=self.session,
            sim_time=self.sim_time,
            origin=coord,
            outcome=outcome.value,
        )
        return outcome

    def on_expired(
        self, coord: GridCoordinate, cell_id: int | None = None
    ) -> SpawnResult | None:
        """Release the cell at ``coord`` and refill if below the floor.

        A notification for a coordinate that is no longer held (or is held
        by a different cell than ``cell_id``) is a no-op.

        Returns:
            The corrective spawn result, or None if none was attempted
        """
        cell = self._cells.get(coord)
        if not self.is_running or cell is None or (
            cell_id is not None and cell.cell_id != cell_id
        ):
            self._logger.debug(
                "expiry_already_handled", coord=str(coord), cell_id=cell_id
            )
            return None

        del self._cells[coord]
        self.grid.release(coord)
        cell.destroy()
        record_cell_expired()
        update_active_cells(self.active_count)

        self._logger.info(
            "cell_expired",
            coord=str(coord),
            cell_id=cell.cell_id,
            active_count=self.active_count,
        )

        if self.active_count < self._floor:
            return self._corrective_spawn()
        return None

    def _corrective_spawn(self) -> SpawnResult:
        """Immediate refill next to the player, else next to the origin."""
        player_coord = self.player_placement.coord
        result = self._spawn_adjacent(
            GridCoordinate(*player_coord),
            self.scheduler.candidate_order(),
            reason="corrective",
        )
        if result.outcome is SpawnOutcome.NO_FREE_SLOT:
            result = self._spawn_adjacent(
                self.origin_coord, PRIORITY_ORDER, reason="corrective"
            )

        self._logger.info(
            "corrective_spawn",
            outcome=result.outcome.value,
            origin=str(result.origin),
            coord=str(result.coord) if result.coord else None,
        )
        return result

    # ------------------------------------------------------------------
    # Cell creation
    # ------------------------------------------------------------------

    def spawn_cell(self, coord: GridCoordinate, reason: str = "direct") -> SpawnResult:
        """Create a cell at ``coord``; the only path that adds to the active set.

        Returns:
            MATERIALIZED with the new cell id, ADMISSION_REJECTED at the
            ceiling, or NO_FREE_SLOT if ``coord`` is already held
        """
        if not self.is_running:
            raise NotRunningError("spawn a cell")

        if self.active_count >= self.max_active_cells:
            self._logger.info(
                "spawn_canceled_max_reached",
                coord=str(coord),
                active_count=self.active_count,
            )
            return SpawnResult(SpawnOutcome.ADMISSION_REJECTED, None, coord)

        if self.grid.is_occupied(coord):
            self._logger.debug("spawn_target_occupied", coord=str(coord))
            return SpawnResult(SpawnOutcome.NO_FREE_SLOT, None, coord)

        cell = Cell.create(
            coord,
            self.settings.min_lifetime,
            self.settings.max_lifetime,
            self._rng,
            cell_id=next(self._cell_ids),
        )
        self.grid.occupy(coord)
        self._cells[coord] = cell

        record_cell_spawned(reason, cell.total_lifetime)
        update_active_cells(self.active_count)
        self.event_log.append(
            "CellCreated",
            session=self.session,
            sim_time=self.sim_time,
            coord=coord,
            cell_id=cell.cell_id,
            reason=reason,
            lifetime=cell.total_lifetime,
        )
        self._logger.info(
            "cell_spawned",
            coord=str(coord),
            cell_id=cell.cell_id,
            lifetime=round(cell.total_lifetime, 3),
            reason=reason,
            active_count=self.active_count,
        )
        return SpawnResult(SpawnOutcome.MATERIALIZED, None, coord, cell.cell_id)

    def _spawn_adjacent(
        self,
        base: GridCoordinate,
        order: tuple[Direction, ...] | list[Direction],
        reason: str,
    ) -> SpawnResult:
        """Immediate (non-delayed) placement next to ``base``."""
        if self.active_count >= self.max_active_cells:
            result = SpawnResult(SpawnOutcome.ADMISSION_REJECTED, base)
        else:
            candidate = self.grid.first_free_neighbor(base, order)
            if candidate is None:
                result = SpawnResult(SpawnOutcome.NO_FREE_SLOT, base)
            else:
                placed = self.spawn_cell(candidate, reason=reason)
                result = SpawnResult(placed.outcome, base, placed.coord, placed.cell_id)

        self._record_outcome(result)
        return result

    def _record_outcome(
        self, result: SpawnResult, already_counted: bool = False
    ) -> None:
        if not already_counted:
            record_spawn_outcome(result.outcome.value)
        self._frame_spawns.append(result)
        self.event_log.append(
            "SpawnOutcome",
            session=self.session,
            sim_time=self.sim_time,
            origin=result.origin,
            coord=result.coord,
            cell_id=result.cell_id,
            outcome=result.outcome.value,
        )

    # ------------------------------------------------------------------
    # Player placement
    # ------------------------------------------------------------------

    def _place_player(self, coord: GridCoordinate) -> PlayerPlacement:
        self._player_position = self.grid.center_of(
            coord, self.settings.elevation_offset
        )
        self._logger.info(
            "player_placed", coord=str(coord), position=tuple(self._player_position)
        )
        return self.player_placement

    def update_player_position(self, position: WorldPoint) -> GridCoordinate:
        """Record where the presentation layer says the player is.

        Returns:
            The player's aligned grid coordinate

        Raises:
            InvalidInput: If a component is not a finite number; the previous
                position is kept
        """
        if not self.is_running:
            raise NotRunningError("track the player")
        if isinstance(position, GridCoordinate):
            position = self.grid.center_of(position, self.settings.elevation_offset)
        elif len(position) == 2:
            position = Position(position[0], self.grid.elevation, position[1])
        if len(position) != 3 or not all(math.isfinite(v) for v in position):
            raise InvalidInput("position", position, "must be finite (x, y, z)")

        candidate = Position(*position)
        coord = self.grid.align(candidate)
        self._player_position = candidate
        return coord

    @property
    def player_placement(self) -> PlayerPlacement:
        """Aligned player coordinate and the elevated center of that cell."""
        if not self.is_running or self._player_position is None:
            raise NotRunningError("read the player placement")
        coord = self.grid.align(self._player_position)
        center = self.grid.center_of(coord, self.settings.elevation_offset)
        return PlayerPlacement(coord=tuple(coord), position=tuple(center))

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def active_count(self) -> int:
        return len(self._cells)

    @property
    def max_active_cells(self) -> int:
        return self.settings.max_active_cells

    @property
    def floor(self) -> int:
        return self._floor

    @property
    def cells(self) -> tuple[Cell, ...]:
        """Live cells in creation order."""
        return tuple(self._cells.values())

    def cell_at(self, coord: GridCoordinate) -> Cell | None:
        return self._cells.get(coord)

    @property
    def pending_spawns(self) -> list[PendingSpawn]:
        if self.scheduler is None:
            return []
        return self.scheduler.pending()

    def snapshot(self) -> WorldSnapshot:
        """Read model for presentation and debugging."""
        cells = []
        pending = []
        player = None
        if self.is_running:
            cells = [
                CellView(
                    cell_id=cell.cell_id,
                    coord=tuple(cell.coord),
                    position=tuple(self.grid.center_of(cell.coord)),
                    remaining=cell.remaining,
                    total_lifetime=cell.total_lifetime,
                    state=cell.state.value,
                )
                for cell in self._cells.values()
            ]
            pending = [
                PendingSpawnView(
                    origin=tuple(spawn.origin),
                    due_at=spawn.due_at,
                    time_remaining=spawn.time_remaining(self.sim_time),
                )
                for spawn in self.scheduler.pending()
            ]
            player = self.player_placement

        return WorldSnapshot(
            session=self.session,
            state=self.state.value,
            sim_time=self.sim_time,
            max_active_cells=self.max_active_cells,
            cells=cells,
            pending_spawns=pending,
            player=player,
        )


def _elevation_of(point: WorldPoint) -> float:
    if isinstance(point, GridCoordinate) or len(point) == 2:
        return 0.0
    return float(point[1])
