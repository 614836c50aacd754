"""pulpit - Grid platform lifecycle scheduler.

pulpit decides where short-lived platforms may appear on a fixed grid, when
a neighbor must be scheduled relative to a platform's countdown, and keeps
the number of live platforms under a ceiling while concurrent countdowns
request new ones.
"""

__version__ = "0.1.0"

from .config import Config, GameSettings, load_config
from .core import (
    Cell,
    EventLog,
    FrameLoop,
    FrameReport,
    GridIndex,
    Orchestrator,
    OrchestratorState,
    PendingSpawn,
    SpawnScheduler,
)
from .schemas import (
    CellEvent,
    CellState,
    Direction,
    GridCoordinate,
    Position,
    SpawnOutcome,
    SpawnResult,
    WorldSnapshot,
)
from .utils.errors import (
    InvalidConfiguration,
    InvalidInput,
    NotRunningError,
    SimulationError,
)

__all__ = [
    "Cell",
    "CellEvent",
    "CellState",
    "Config",
    "Direction",
    "EventLog",
    "FrameLoop",
    "FrameReport",
    "GameSettings",
    "GridCoordinate",
    "GridIndex",
    "InvalidConfiguration",
    "InvalidInput",
    "NotRunningError",
    "Orchestrator",
    "OrchestratorState",
    "PendingSpawn",
    "Position",
    "SimulationError",
    "SpawnOutcome",
    "SpawnResult",
    "SpawnScheduler",
    "WorldSnapshot",
    "__version__",
    "load_config",
]
