"""Structured error types for the platform scheduler.

This module provides structured exceptions with recovery actions for the
failure conditions of the scheduling core. Normal spawn outcomes (admission
rejected, no free slot, duplicate suppressed) are not exceptions; see
``pulpit.schemas.types.SpawnOutcome``.
"""

from enum import Enum
from typing import Any


class RecoveryAction(Enum):
    """Recovery actions for error handling."""

    ABORT = "abort"
    IGNORE = "ignore"
    RESET = "reset"


class SimulationError(Exception):
    """Base exception for scheduler errors."""

    def __init__(
        self, message: str, recovery_action: RecoveryAction = RecoveryAction.ABORT
    ):
        """Initialize simulation error.

        Args:
            message: Error message
            recovery_action: Suggested recovery action
        """
        super().__init__(message)
        self.recovery_action = recovery_action


class InvalidConfiguration(SimulationError):
    """Error raised when game parameters cannot produce a valid session.

    This is fatal: the orchestrator refuses to enter the running state
    while its configuration is invalid.
    """

    def __init__(
        self, field: str, value: Any, reason: str, message: str | None = None
    ):
        """Initialize invalid configuration error.

        Args:
            field: Name of the offending parameter
            value: Value that was rejected
            reason: Human-readable constraint that was violated
            message: Full message, built from the other fields if None
        """
        self.field = field
        self.value = value
        self.reason = reason

        if message is None:
            message = f"Invalid configuration {field}={value!r}: {reason}"
        super().__init__(message, RecoveryAction.ABORT)


class ConfigError(InvalidConfiguration):
    """Error raised when configuration cannot be loaded from a file or env."""

    def __init__(self, message: str, source: str = "config"):
        """Initialize configuration loading error.

        Args:
            message: Description of what went wrong
            source: File path or environment variable that failed
        """
        self.source = source
        super().__init__(source, None, message, message=message)


class InvalidInput(SimulationError):
    """Error raised when a caller passes an unusable argument.

    The call is rejected and prior state is left unchanged.
    """

    def __init__(self, argument: str, value: Any, reason: str):
        """Initialize invalid input error.

        Args:
            argument: Argument name
            value: Value that was rejected
            reason: Constraint that was violated
        """
        self.argument = argument
        self.value = value

        message = f"Invalid input {argument}={value!r}: {reason}"
        super().__init__(message, RecoveryAction.IGNORE)


class NotRunningError(SimulationError):
    """Error raised when the orchestrator is driven before initialize()."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: orchestrator is not running", RecoveryAction.RESET
        )


class OccupiedCoordinateError(SimulationError):
    """Error raised when occupying a grid coordinate that is already held."""

    def __init__(self, coord: Any):
        self.coord = coord
        super().__init__(f"Grid coordinate {tuple(coord)} is already occupied")
