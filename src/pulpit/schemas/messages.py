"""Pydantic read models handed to the presentation layer."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CellView(BaseModel):
    """Display data for one live cell."""

    cell_id: int = Field(description="Creation-ordered cell identifier", ge=1)
    coord: tuple[int, int] = Field(
        description="(col, row) grid coordinate",
        json_schema_extra={"example": [0, 1]},
    )
    position: tuple[float, float, float] = Field(
        description="World-space center of the cell"
    )
    remaining: float = Field(description="Seconds left before expiry")
    total_lifetime: float = Field(description="Lifetime drawn at creation", gt=0)
    state: Literal["pending", "live", "expiring", "destroyed"]

    model_config = ConfigDict(frozen=True)


class PendingSpawnView(BaseModel):
    """Display data for one scheduled spawn."""

    origin: tuple[int, int] = Field(description="Origin coordinate (dedup key)")
    due_at: float = Field(description="Simulation time the spawn fires")
    time_remaining: float = Field(description="Seconds until the spawn fires", ge=0)

    model_config = ConfigDict(frozen=True)


class PlayerPlacement(BaseModel):
    """Where the player reference stands: aligned coordinate plus elevation."""

    coord: tuple[int, int] = Field(description="Aligned grid coordinate")
    position: tuple[float, float, float] = Field(
        description="Cell center raised by the elevation offset",
        json_schema_extra={"example": [0.0, 1.0, 0.0]},
    )

    model_config = ConfigDict(frozen=True)


class WorldSnapshot(BaseModel):
    """Complete read-only view of the scheduler for one frame."""

    session: int = Field(description="Session number, bumped on every reset", ge=0)
    state: Literal["uninitialized", "running"]
    sim_time: float = Field(description="Simulation seconds since initialize", ge=0)
    max_active_cells: int = Field(ge=1)
    cells: list[CellView] = Field(default_factory=list)
    pending_spawns: list[PendingSpawnView] = Field(default_factory=list)
    player: PlayerPlacement | None = None

    model_config = ConfigDict(extra="forbid")

    @property
    def active_count(self) -> int:
        return len(self.cells)
