"""Unit tests for configuration loading and validation."""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from pulpit.config import (
    Config,
    GameSettings,
    load_config,
    load_config_from_env,
    load_config_from_file,
    validate_config,
    validate_settings,
)
from pulpit.utils.errors import ConfigError, InvalidConfiguration

ENV_VARS = [
    "PULPIT_MIN_LIFETIME",
    "PULPIT_MAX_LIFETIME",
    "PULPIT_SPAWN_INTERVAL",
    "PULPIT_MAX_ACTIVE_CELLS",
    "PULPIT_INITIAL_FILL",
    "PULPIT_GRID_SPACING",
    "PULPIT_MOVEMENT_SPEED",
    "PULPIT_SEED",
    "PULPIT_NEIGHBOR_ORDER",
    "PULPIT_LOG_LEVEL",
    "PULPIT_LOG_FORMAT",
    "PULPIT_METRICS_PORT",
    "PULPIT_FRAME_RATE",
    "PULPIT_DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestGameSettings:
    """Test game parameter defaults and validation."""

    def test_defaults(self) -> None:
        settings = GameSettings()

        assert settings.min_lifetime == 4.0
        assert settings.max_lifetime == 5.0
        assert settings.spawn_interval == 2.5
        assert settings.max_active_cells == 2
        assert settings.initial_fill_count == 1
        assert settings.neighbor_order == "fixed"
        validate_settings(settings)

    def test_frozen(self) -> None:
        settings = GameSettings()
        with pytest.raises(ValidationError):
            settings.max_active_cells = 5  # type: ignore[misc]

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GameSettings(max_platforms=3)  # type: ignore[call-arg]

    def test_equal_lifetimes_allowed(self) -> None:
        validate_settings(GameSettings(min_lifetime=3.0, max_lifetime=3.0))

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"min_lifetime": 0.0}, "min_lifetime"),
            ({"max_lifetime": -1.0}, "max_lifetime"),
            ({"min_lifetime": 5.0, "max_lifetime": 4.0}, "max_lifetime"),
            ({"spawn_interval": 0.0}, "spawn_interval"),
            ({"max_active_cells": 0}, "max_active_cells"),
            ({"initial_fill_count": 0}, "initial_fill_count"),
            ({"grid_spacing": 0.0}, "grid_spacing"),
            ({"movement_speed": -2.0}, "movement_speed"),
            ({"max_lifetime": float("inf")}, "max_lifetime"),
            ({"spawn_interval": float("nan")}, "spawn_interval"),
            ({"origin": (0.0, 0.0, float("inf"))}, "origin"),
        ],
    )
    def test_invalid_values(self, overrides: dict, field: str) -> None:
        with pytest.raises(InvalidConfiguration) as exc_info:
            validate_settings(GameSettings(**overrides))
        assert exc_info.value.field == field


class TestLoadFromFile:
    """Test YAML and JSON file loading."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "game": {"max_active_cells": 4, "neighbor_order": "shuffled"},
                    "logging": {"level": "DEBUG", "format": "text"},
                }
            )
        )

        config = load_config_from_file(path)

        assert config.game.max_active_cells == 4
        assert config.game.neighbor_order == "shuffled"
        assert config.logging.level == "DEBUG"

    def test_game_json_layout(self, tmp_path: Path) -> None:
        path = tmp_path / "game_config.json"
        path.write_text(
            json.dumps(
                {
                    "player_data": {"speed": 7},
                    "pulpit_data": {
                        "min_pulpit_destroy_time": 3,
                        "max_pulpit_destroy_time": 6,
                        "pulpit_spawn_time": 2,
                    },
                }
            )
        )

        config = load_config_from_file(path)

        assert config.game.movement_speed == 7.0
        assert config.game.min_lifetime == 3.0
        assert config.game.max_lifetime == 6.0
        assert config.game.spawn_interval == 2.0

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config_from_file(path).model_dump() == Config().model_dump()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config_from_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("game: [unclosed")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config_from_file(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config_from_file(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config_from_file(path)

    def test_schema_violation(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"game": {"neighbor_order": "spiral"}}))

        with pytest.raises(ConfigError, match="validation failed"):
            load_config_from_file(path)


class TestLoadFromEnv:
    """Test environment variable loading."""

    def test_no_env_gives_defaults(self) -> None:
        assert load_config_from_env().model_dump() == Config().model_dump()

    def test_game_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULPIT_MIN_LIFETIME", "2.5")
        monkeypatch.setenv("PULPIT_MAX_ACTIVE_CELLS", "5")
        monkeypatch.setenv("PULPIT_SEED", "42")
        monkeypatch.setenv("PULPIT_NEIGHBOR_ORDER", "SHUFFLED")

        config = load_config_from_env()

        assert config.game.min_lifetime == 2.5
        assert config.game.max_active_cells == 5
        assert config.game.seed == 42
        assert config.game.neighbor_order == "shuffled"

    def test_ambient_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULPIT_LOG_LEVEL", "debug")
        monkeypatch.setenv("PULPIT_LOG_FORMAT", "TEXT")
        monkeypatch.setenv("PULPIT_METRICS_PORT", "9100")
        monkeypatch.setenv("PULPIT_FRAME_RATE", "30")
        monkeypatch.setenv("PULPIT_DEBUG", "yes")

        config = load_config_from_env()

        assert config.logging.level == "DEBUG"
        assert config.logging.format == "text"
        assert config.metrics.enabled is True
        assert config.metrics.port == 9100
        assert config.frame_loop.frame_rate == 30.0
        assert config.debug is True

    def test_unparseable_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULPIT_MAX_ACTIVE_CELLS", "many")

        with pytest.raises(ConfigError) as exc_info:
            load_config_from_env()
        assert exc_info.value.source == "PULPIT_MAX_ACTIVE_CELLS"

    def test_bad_metrics_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULPIT_METRICS_PORT", "http")
        with pytest.raises(ConfigError):
            load_config_from_env()


class TestLoadConfig:
    """Test layered configuration loading."""

    def test_defaults_only(self) -> None:
        assert load_config().model_dump() == Config().model_dump()

    def test_env_overrides_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {"game": {"max_active_cells": 4, "spawn_interval": 1.0}}
            )
        )
        monkeypatch.setenv("PULPIT_MAX_ACTIVE_CELLS", "6")

        config = load_config(path)

        assert config.game.max_active_cells == 6
        assert config.game.spawn_interval == 1.0
        # Untouched fields keep defaults
        assert config.game.min_lifetime == 4.0

    def test_file_keeps_unset_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"frame_loop": {"frame_rate": 30}}))

        config = load_config(path)

        assert config.frame_loop.frame_rate == 30.0
        assert config.frame_loop.max_frame_dt == 0.1
        assert config.game.model_dump() == GameSettings().model_dump()


class TestValidateConfig:
    """Test whole-config validation."""

    def test_default_config_is_valid(self) -> None:
        validate_config(Config())

    def test_invalid_game_settings(self) -> None:
        config = Config(game=GameSettings(max_active_cells=0))
        with pytest.raises(InvalidConfiguration):
            validate_config(config)

    def test_invalid_metrics_port(self) -> None:
        config = Config(metrics={"port": 70000})
        with pytest.raises(ConfigError, match="metrics.port"):
            validate_config(config)

    def test_invalid_frame_rate(self) -> None:
        config = Config(frame_loop={"frame_rate": 0})
        with pytest.raises(ConfigError, match="frame_rate"):
            validate_config(config)
