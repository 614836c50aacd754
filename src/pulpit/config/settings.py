"""Game parameters consumed by the scheduling core."""

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pulpit.utils.errors import InvalidConfiguration


class GameSettings(BaseModel):
    """Numeric parameters for one running session.

    Immutable while a session runs; a new instance can be swapped in across
    ``Orchestrator.reset``.
    """

    min_lifetime: float = Field(default=4.0, description="Shortest cell lifetime (s)")
    max_lifetime: float = Field(default=5.0, description="Longest cell lifetime (s)")
    spawn_interval: float = Field(
        default=2.5, description="Delay between a spawn request and its attempt (s)"
    )
    max_active_cells: int = Field(default=2, description="Ceiling on live cells")
    initial_fill_count: int = Field(
        default=1, description="Cells placed at start; also the refill floor"
    )
    grid_spacing: float = Field(default=3.0, description="Center-to-center distance")
    movement_speed: float = Field(default=5.0, description="Player speed hint")
    neighbor_order: Literal["fixed", "shuffled"] = "fixed"
    elevation_offset: float = Field(
        default=1.0, description="Height of the player reference above a cell"
    )
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    seed: int | None = Field(default=None, description="RNG seed for lifetimes")

    model_config = ConfigDict(frozen=True, extra="forbid")


def validate_settings(settings: GameSettings) -> None:
    """Check that ``settings`` can produce a valid session.

    Raises:
        InvalidConfiguration: On the first violated constraint
    """
    for name in ("min_lifetime", "max_lifetime", "spawn_interval", "grid_spacing"):
        value = getattr(settings, name)
        if not math.isfinite(value):
            raise InvalidConfiguration(name, value, "must be finite")
    if not all(math.isfinite(v) for v in settings.origin):
        raise InvalidConfiguration("origin", settings.origin, "must be finite")
    if not settings.min_lifetime > 0:
        raise InvalidConfiguration(
            "min_lifetime", settings.min_lifetime, "must be positive"
        )
    if not settings.max_lifetime > 0:
        raise InvalidConfiguration(
            "max_lifetime", settings.max_lifetime, "must be positive"
        )
    if settings.max_lifetime < settings.min_lifetime:
        raise InvalidConfiguration(
            "max_lifetime",
            settings.max_lifetime,
            f"must be >= min_lifetime ({settings.min_lifetime})",
        )
    if not settings.spawn_interval > 0:
        raise InvalidConfiguration(
            "spawn_interval", settings.spawn_interval, "must be positive"
        )
    if settings.max_active_cells < 1:
        raise InvalidConfiguration(
            "max_active_cells", settings.max_active_cells, "must be at least 1"
        )
    if settings.initial_fill_count < 1:
        raise InvalidConfiguration(
            "initial_fill_count", settings.initial_fill_count, "must be at least 1"
        )
    if not settings.grid_spacing > 0:
        raise InvalidConfiguration(
            "grid_spacing", settings.grid_spacing, "must be positive"
        )
    if settings.movement_speed < 0:
        raise InvalidConfiguration(
            "movement_speed", settings.movement_speed, "must be non-negative"
        )
