"""Unit tests for structured error types."""

from pulpit.schemas.types import GridCoordinate
from pulpit.utils.errors import (
    ConfigError,
    InvalidConfiguration,
    InvalidInput,
    NotRunningError,
    OccupiedCoordinateError,
    RecoveryAction,
    SimulationError,
)


class TestSimulationError:
    """Test base SimulationError class."""

    def test_initialization(self) -> None:
        """Test error initialization with message and recovery action."""
        error = SimulationError("Test error", RecoveryAction.RESET)
        assert str(error) == "Test error"
        assert error.recovery_action == RecoveryAction.RESET

    def test_default_recovery_action(self) -> None:
        """Test default recovery action is ABORT."""
        error = SimulationError("Test error")
        assert error.recovery_action == RecoveryAction.ABORT


class TestInvalidConfiguration:
    """Test InvalidConfiguration class."""

    def test_initialization(self) -> None:
        error = InvalidConfiguration("max_lifetime", 3.0, "must be >= min_lifetime")

        assert error.field == "max_lifetime"
        assert error.value == 3.0
        assert error.reason == "must be >= min_lifetime"
        assert error.recovery_action == RecoveryAction.ABORT
        assert isinstance(error, SimulationError)

    def test_message_format(self) -> None:
        error = InvalidConfiguration("spawn_interval", 0, "must be positive")
        assert str(error) == "Invalid configuration spawn_interval=0: must be positive"


class TestConfigError:
    """Test ConfigError class."""

    def test_is_invalid_configuration(self) -> None:
        error = ConfigError("Configuration file not found: x.yaml", "x.yaml")

        assert isinstance(error, InvalidConfiguration)
        assert error.source == "x.yaml"
        assert str(error) == "Configuration file not found: x.yaml"

    def test_fields_set_by_base_class(self) -> None:
        error = ConfigError("Invalid PULPIT_SEED: abc", "PULPIT_SEED")

        assert error.field == "PULPIT_SEED"
        assert error.value is None
        assert error.reason == "Invalid PULPIT_SEED: abc"
        assert error.recovery_action == RecoveryAction.ABORT

    def test_default_source(self) -> None:
        assert ConfigError("broken").source == "config"


class TestInvalidInput:
    """Test InvalidInput class."""

    def test_initialization(self) -> None:
        error = InvalidInput("dt", -0.5, "time cannot run backwards")

        assert error.argument == "dt"
        assert error.value == -0.5
        assert error.recovery_action == RecoveryAction.IGNORE
        assert "dt=-0.5" in str(error)


class TestNotRunningError:
    """Test NotRunningError class."""

    def test_initialization(self) -> None:
        error = NotRunningError("advance")

        assert error.operation == "advance"
        assert error.recovery_action == RecoveryAction.RESET
        assert str(error) == "Cannot advance: orchestrator is not running"


class TestOccupiedCoordinateError:
    """Test OccupiedCoordinateError class."""

    def test_message(self) -> None:
        error = OccupiedCoordinateError(GridCoordinate(2, -1))

        assert error.coord == GridCoordinate(2, -1)
        assert "(2, -1)" in str(error)
