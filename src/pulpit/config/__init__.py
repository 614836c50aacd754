"""Configuration management for pulpit.

This module provides configuration loading and validation for the
platform scheduler and its ambient services.
"""

from .config import (
    Config,
    FrameLoopConfig,
    LoggingConfig,
    MetricsConfig,
    load_config,
    load_config_from_env,
    load_config_from_file,
    validate_config,
)
from .settings import GameSettings, validate_settings

__all__ = [
    "Config",
    "FrameLoopConfig",
    "GameSettings",
    "LoggingConfig",
    "MetricsConfig",
    "load_config",
    "load_config_from_env",
    "load_config_from_file",
    "validate_config",
    "validate_settings",
]
