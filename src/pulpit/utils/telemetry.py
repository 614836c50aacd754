"""Telemetry utilities for logging and metrics.

This module provides centralized observability infrastructure including:
- Structured logging via structlog
- Prometheus metrics for cell lifecycle and spawn outcomes
- Performance measurement for frame advances
"""

import logging
import sys
import time
from typing import Any

import structlog
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Prometheus metrics
OPERATION_COUNTER = Counter(
    "pulpit_operations_total",
    "Total number of operations",
    ["operation", "status"],
)

OPERATION_LATENCY = Histogram(
    "pulpit_operation_duration_seconds",
    "Operation latency in seconds",
    ["operation"],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.02, 0.05, 0.1],
)

CELLS_SPAWNED = Counter(
    "pulpit_cells_spawned_total",
    "Total number of cells created",
    ["reason"],
)

CELLS_EXPIRED = Counter(
    "pulpit_cells_expired_total",
    "Total number of cells that reached the end of their lifetime",
)

SPAWN_OUTCOMES = Counter(
    "pulpit_spawn_outcomes_total",
    "Spawn requests and attempts by outcome",
    ["outcome"],
)

CELL_LIFETIME = Histogram(
    "pulpit_cell_lifetime_seconds",
    "Lifetime drawn for each new cell",
    buckets=[0.5, 1.0, 2.0, 3.0, 4.0, 5.0, 7.5, 10.0, 20.0],
)

ACTIVE_CELLS_GAUGE = Gauge(
    "pulpit_active_cells",
    "Number of currently live cells",
)

PENDING_SPAWNS_GAUGE = Gauge(
    "pulpit_pending_spawns",
    "Number of scheduled spawns that have not fired yet",
)

SESSION_RESETS = Counter(
    "pulpit_session_resets_total",
    "Number of times the orchestrator was reset",
)


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Initialize structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_output: Render JSON lines instead of the console format
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **context: Any) -> Any:
    """Get a structured logger with optional context.

    Args:
        name: Logger name
        **context: Additional context to bind to logger

    Returns:
        Bound logger with context
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


def log_operation(
    logger: Any,
    operation: str,
    status: str = "success",
    session: int | None = None,
    sim_time: float | None = None,
    latency_ms: float | None = None,
    **extra_context: Any,
) -> None:
    """Log an operation with standardized fields.

    Args:
        logger: Structured logger instance
        operation: Operation name
        status: Operation status (success, error, warning)
        session: Orchestrator session number
        sim_time: Simulation time in seconds
        latency_ms: Operation latency in milliseconds
        **extra_context: Additional context fields
    """
    log_data = {
        "operation": operation,
        "status": status,
        **extra_context,
    }

    if session is not None:
        log_data["session"] = session
    if sim_time is not None:
        log_data["sim_time"] = round(sim_time, 6)
    if latency_ms is not None:
        log_data["latency_ms"] = latency_ms

    if status == "error":
        logger.error("operation_completed", **log_data)
    elif status == "warning":
        logger.warning("operation_completed", **log_data)
    else:
        logger.debug("operation_completed", **log_data)


class PerformanceTimer:
    """Context manager for measuring operation performance.

    Records latency and status metrics and logs the timing on exit.
    """

    def __init__(
        self,
        operation: str,
        logger: Any | None = None,
        record_metrics: bool = True,
        **context: Any,
    ):
        self.operation = operation
        self.logger = logger or get_logger("pulpit.performance")
        self.record_metrics = record_metrics
        self.context = context
        self.start_time: float | None = None
        self.end_time: float | None = None

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.end_time = time.perf_counter()
        duration = self.end_time - (self.start_time or 0)

        status = "error" if exc_type else "success"

        if self.record_metrics:
            OPERATION_COUNTER.labels(operation=self.operation, status=status).inc()
            OPERATION_LATENCY.labels(operation=self.operation).observe(duration)

        log_operation(
            self.logger,
            self.operation,
            status=status,
            latency_ms=duration * 1000,
            **self.context,
        )

    @property
    def duration(self) -> float | None:
        """Get operation duration in seconds."""
        if self.start_time is not None and self.end_time is not None:
            return self.end_time - self.start_time
        return None


def record_spawn_outcome(outcome: str) -> None:
    """Record a spawn request or attempt outcome.

    Args:
        outcome: SpawnOutcome value
    """
    SPAWN_OUTCOMES.labels(outcome=outcome).inc()


def record_cell_spawned(reason: str, lifetime: float) -> None:
    """Record the creation of a cell.

    Args:
        reason: Creation path (initial, scheduled, corrective)
        lifetime: Total lifetime drawn for the cell
    """
    CELLS_SPAWNED.labels(reason=reason).inc()
    CELL_LIFETIME.observe(lifetime)


def record_cell_expired() -> None:
    """Record a cell reaching the end of its lifetime."""
    CELLS_EXPIRED.inc()


def update_active_cells(count: int) -> None:
    """Update the live cell gauge."""
    ACTIVE_CELLS_GAUGE.set(count)


def update_pending_spawns(count: int) -> None:
    """Update the pending spawn gauge."""
    PENDING_SPAWNS_GAUGE.set(count)


def record_session_reset() -> None:
    """Record an orchestrator reset."""
    SESSION_RESETS.inc()


def start_metrics_server(port: int = 8000) -> None:
    """Start Prometheus metrics HTTP server.

    Args:
        port: Port to serve metrics on
    """
    start_http_server(port)
    get_logger("pulpit.telemetry").info("metrics_server_started", port=port)


class MonotonicClock:
    """Clock helpers for timing measurements."""

    @staticmethod
    def now() -> float:
        """Get current monotonic time in seconds."""
        return time.monotonic()

    @staticmethod
    def wall_time() -> float:
        """Get current wall clock time in seconds since the epoch."""
        return time.time()
