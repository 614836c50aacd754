"""Configuration loading for pulpit.

This module provides the top-level configuration model and loaders for YAML
files, the game's ``game_config.json`` layout, and environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from pulpit.config.settings import GameSettings, validate_settings
from pulpit.utils.errors import ConfigError


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "json"


class MetricsConfig(BaseModel):
    """Metrics configuration."""

    enabled: bool = False
    port: int = 8000


class FrameLoopConfig(BaseModel):
    """Real-time driver configuration."""

    frame_rate: float = Field(default=60.0, description="Target frames per second")
    max_frame_dt: float = Field(
        default=0.1, description="Largest dt handed to a single advance() call"
    )


class Config(BaseModel):
    """Main configuration class for pulpit."""

    game: GameSettings = Field(default_factory=GameSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    frame_loop: FrameLoopConfig = Field(default_factory=FrameLoopConfig)
    debug: bool = False


def _from_game_json(data: dict[str, Any]) -> dict[str, Any]:
    """Translate the game's JSON layout into Config fields.

    The layout is::

        {"player_data": {"speed": 5},
         "pulpit_data": {"min_pulpit_destroy_time": 4,
                         "max_pulpit_destroy_time": 5,
                         "pulpit_spawn_time": 2.5}}
    """
    game: dict[str, Any] = {}
    player = data.get("player_data") or {}
    pulpit = data.get("pulpit_data") or {}

    if "speed" in player:
        game["movement_speed"] = player["speed"]
    if "min_pulpit_destroy_time" in pulpit:
        game["min_lifetime"] = pulpit["min_pulpit_destroy_time"]
    if "max_pulpit_destroy_time" in pulpit:
        game["max_lifetime"] = pulpit["max_pulpit_destroy_time"]
    if "pulpit_spawn_time" in pulpit:
        game["spawn_interval"] = pulpit["pulpit_spawn_time"]

    return {"game": game}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_from_file(config_path: Path) -> Config:
    """Load configuration from a YAML or JSON file.

    JSON files in the game layout (``player_data`` / ``pulpit_data``) are
    translated; any other content must match the ``Config`` shape.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    config_path = Path(config_path)
    try:
        with open(config_path) as f:
            if config_path.suffix.lower() == ".json":
                config_data = json.load(f)
            else:
                config_data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            f"Configuration file not found: {config_path}", str(config_path)
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"Invalid JSON in configuration file: {e}", str(config_path)
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in configuration file: {e}", str(config_path)
        ) from e

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        raise ConfigError(
            f"Configuration root must be a mapping, got {type(config_data).__name__}",
            str(config_path),
        )

    if "player_data" in config_data or "pulpit_data" in config_data:
        config_data = _from_game_json(config_data)

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigError(
            f"Configuration validation failed: {e}", str(config_path)
        ) from e


_ENV_GAME_FIELDS: dict[str, tuple[str, type]] = {
    "PULPIT_MIN_LIFETIME": ("min_lifetime", float),
    "PULPIT_MAX_LIFETIME": ("max_lifetime", float),
    "PULPIT_SPAWN_INTERVAL": ("spawn_interval", float),
    "PULPIT_MAX_ACTIVE_CELLS": ("max_active_cells", int),
    "PULPIT_INITIAL_FILL": ("initial_fill_count", int),
    "PULPIT_GRID_SPACING": ("grid_spacing", float),
    "PULPIT_MOVEMENT_SPEED": ("movement_speed", float),
    "PULPIT_SEED": ("seed", int),
}


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Environment variables are mapped as follows:
    - PULPIT_MIN_LIFETIME / PULPIT_MAX_LIFETIME: Cell lifetime range
    - PULPIT_SPAWN_INTERVAL: Delay before a scheduled spawn fires
    - PULPIT_MAX_ACTIVE_CELLS: Ceiling on live cells
    - PULPIT_INITIAL_FILL: Cells placed at start
    - PULPIT_GRID_SPACING: Grid cell spacing
    - PULPIT_MOVEMENT_SPEED: Player speed hint
    - PULPIT_NEIGHBOR_ORDER: fixed or shuffled
    - PULPIT_SEED: RNG seed
    - PULPIT_LOG_LEVEL / PULPIT_LOG_FORMAT: Logging
    - PULPIT_METRICS_PORT: Enables the metrics server on this port
    - PULPIT_FRAME_RATE: Frame loop rate
    - PULPIT_DEBUG: Enable debug mode (true/false)

    Raises:
        ConfigError: If a variable cannot be parsed
    """
    config_data: dict[str, Any] = {}

    game_config: dict[str, Any] = {}
    for env_var, (field_name, caster) in _ENV_GAME_FIELDS.items():
        if env_val := os.getenv(env_var):
            try:
                game_config[field_name] = caster(env_val)
            except ValueError as e:
                raise ConfigError(f"Invalid {env_var}: {env_val}", env_var) from e
    if env_val := os.getenv("PULPIT_NEIGHBOR_ORDER"):
        game_config["neighbor_order"] = env_val.lower()
    if game_config:
        config_data["game"] = game_config

    logging_config = {}
    if env_val := os.getenv("PULPIT_LOG_LEVEL"):
        logging_config["level"] = env_val.upper()
    if env_val := os.getenv("PULPIT_LOG_FORMAT"):
        logging_config["format"] = env_val.lower()
    if logging_config:
        config_data["logging"] = logging_config

    if env_val := os.getenv("PULPIT_METRICS_PORT"):
        try:
            config_data["metrics"] = {"enabled": True, "port": int(env_val)}
        except ValueError as e:
            raise ConfigError(
                f"Invalid PULPIT_METRICS_PORT: {env_val}", "PULPIT_METRICS_PORT"
            ) from e

    if env_val := os.getenv("PULPIT_FRAME_RATE"):
        try:
            config_data["frame_loop"] = {"frame_rate": float(env_val)}
        except ValueError as e:
            raise ConfigError(
                f"Invalid PULPIT_FRAME_RATE: {env_val}", "PULPIT_FRAME_RATE"
            ) from e

    if env_val := os.getenv("PULPIT_DEBUG"):
        config_data["debug"] = env_val.lower() in ("true", "1", "yes", "on")

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigError(
            f"Environment configuration validation failed: {e}", "environment"
        ) from e


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded in the following order (later sources override earlier):
    1. Default values
    2. Configuration file (if provided)
    3. Environment variables

    Args:
        config_path: Optional path to configuration file

    Returns:
        Merged configuration
    """
    merged: dict[str, Any] = Config().model_dump()

    if config_path is not None:
        file_config = load_config_from_file(config_path)
        merged = _deep_merge(merged, file_config.model_dump(exclude_unset=True))

    env_config = load_config_from_env()
    merged = _deep_merge(merged, env_config.model_dump(exclude_unset=True))

    try:
        return Config(**merged)
    except ValidationError as e:
        raise ConfigError(f"Merged configuration is invalid: {e}") from e


def validate_config(config: Config) -> None:
    """Validate configuration for consistency and correctness.

    Raises:
        InvalidConfiguration: If game settings are unusable
        ConfigError: If an ambient section is invalid
    """
    validate_settings(config.game)

    if config.metrics.port <= 0 or config.metrics.port > 65535:
        raise ConfigError("metrics.port must be between 1 and 65535", "metrics.port")

    if not config.frame_loop.frame_rate > 0:
        raise ConfigError("frame_loop.frame_rate must be positive", "frame_loop")

    if not config.frame_loop.max_frame_dt > 0:
        raise ConfigError("frame_loop.max_frame_dt must be positive", "frame_loop")
