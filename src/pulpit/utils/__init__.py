# Shared utilities and helpers

from .errors import (
    ConfigError,
    InvalidConfiguration,
    InvalidInput,
    NotRunningError,
    OccupiedCoordinateError,
    RecoveryAction,
    SimulationError,
)
from .timing import SimTimedQueue

__all__ = [
    "ConfigError",
    "InvalidConfiguration",
    "InvalidInput",
    "NotRunningError",
    "OccupiedCoordinateError",
    "RecoveryAction",
    "SimTimedQueue",
    "SimulationError",
]
