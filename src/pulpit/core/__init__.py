# Core scheduling components

from .cell import EARLY_WARNING_FRACTION, Cell
from .event_log import EventLog, EventLogEntry
from .frame_loop import FrameLoop
from .grid import GridIndex
from .orchestrator import FrameReport, Orchestrator, OrchestratorState
from .spawn_scheduler import PendingSpawn, SpawnScheduler

__all__ = [
    "EARLY_WARNING_FRACTION",
    "Cell",
    "EventLog",
    "EventLogEntry",
    "FrameLoop",
    "FrameReport",
    "GridIndex",
    "Orchestrator",
    "OrchestratorState",
    "PendingSpawn",
    "SpawnScheduler",
]
