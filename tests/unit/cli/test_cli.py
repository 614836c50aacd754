"""Unit tests for the pulpit command line interface."""

import json
from pathlib import Path

import pytest
import yaml

from pulpit import __version__
from pulpit.cli.__main__ import main
from pulpit.cli.config import run_config_command
from pulpit.cli.simulate import run_simulate_command, simulate
from pulpit.config import Config, GameSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("PULPIT_MAX_ACTIVE_CELLS", "PULPIT_SEED", "PULPIT_METRICS_PORT"):
        monkeypatch.delenv(var, raising=False)


class TestMain:
    """Test top-level command dispatch."""

    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 0
        assert "Commands:" in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["version"]) == 0
        assert capsys.readouterr().out.strip() == f"pulpit {__version__}"

    def test_unknown_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["teleport"]) == 1
        assert "Unknown command: teleport" in capsys.readouterr().out


class TestSimulate:
    """Test the headless simulate command."""

    def test_simulate_summary(self) -> None:
        config = Config(game=GameSettings(seed=4))
        summary = simulate(config, seconds=20.0, dt=1 / 30)

        assert summary["frames"] == 600
        assert summary["sim_time"] == pytest.approx(20.0)
        assert summary["max_active_seen"] <= 2
        assert summary["events"]["EarlyWarning"] >= 3
        assert summary["final"]["state"] == "running"

    def test_follow_moves_player(self) -> None:
        config = Config(game=GameSettings(seed=4))

        following = simulate(config, seconds=20.0, dt=1 / 30, follow=True)
        staying = simulate(config, seconds=20.0, dt=1 / 30, follow=False)

        assert following["player_hops"] > 0
        assert staying["player_hops"] == 0

    def test_command_prints_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        exit_code = run_simulate_command(
            ["--seconds", "6", "--dt", "0.05", "--seed", "1"]
        )

        assert exit_code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["frames"] == 120
        assert summary["session"] == 0

    def test_command_uses_config_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"game": {"max_active_cells": 3}}))

        exit_code = run_simulate_command(["--config", str(path), "--seconds", "1"])

        assert exit_code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["final"]["max_active_cells"] == 3

    def test_invalid_settings(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump({"game": {"min_lifetime": 5.0, "max_lifetime": 1.0}})
        )

        assert run_simulate_command(["--config", str(path)]) == 1
        assert "max_lifetime" in capsys.readouterr().out

    def test_invalid_dt(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_simulate_command(["--dt", "0"]) == 1

    def test_bad_argument(self) -> None:
        assert run_simulate_command(["--bogus"]) == 2


class TestConfigCommand:
    """Test the config subcommands."""

    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_config_command([]) == 0
        assert "validate" in capsys.readouterr().out

    def test_validate_game_json(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "game_config.json"
        path.write_text(
            json.dumps(
                {
                    "player_data": {"speed": 5},
                    "pulpit_data": {
                        "min_pulpit_destroy_time": 4,
                        "max_pulpit_destroy_time": 5,
                        "pulpit_spawn_time": 2.5,
                    },
                }
            )
        )

        assert run_config_command(["validate", str(path)]) == 0
        out = capsys.readouterr().out
        assert "✓ Configuration is valid" in out
        # 2.5s interval against a 4s minimum lifetime (2.4s warning lead)
        assert "warning lead" in out

    def test_validate_previews_initial_session(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "game": {
                        "max_active_cells": 3,
                        "initial_fill_count": 3,
                        "min_lifetime": 6.0,
                        "max_lifetime": 6.0,
                    }
                }
            )
        )

        assert run_config_command(["validate", str(path), "--strict"]) == 0
        out = capsys.readouterr().out
        assert "initial cells: (0, 0), (0, 1), (1, 0)" in out
        assert "refill floor: 3 of 3" in out
        assert "!" not in out

    def test_validate_merges_environment(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"game": {"initial_fill_count": 4}}))
        monkeypatch.setenv("PULPIT_MAX_ACTIVE_CELLS", "1")

        assert run_config_command(["validate", str(path)]) == 0
        out = capsys.readouterr().out
        assert "refill floor: 1 of 1" in out
        assert "clamped to max_active_cells 1" in out
        assert "scheduled neighbors are always rejected" in out

    def test_strict_fails_on_warnings(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_config_command(["validate", "--strict"]) == 1
        assert "--strict" in capsys.readouterr().out

    def test_validate_missing_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_config_command(["validate", str(tmp_path / "nope.yaml")]) == 1
        assert "not found" in capsys.readouterr().out

    def test_validate_invalid_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"game": {"spawn_interval": 0}}))

        assert run_config_command(["validate", str(path)]) == 1
        assert "failed" in capsys.readouterr().out

    def test_validate_env(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_config_command(["validate"]) == 0
        assert "defaults + environment" in capsys.readouterr().out

    def test_show_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_config_command(["show", "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["game"]["max_active_cells"] == 2

    def test_show_yaml(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_config_command(["show", "--format=yaml"]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["game"]["spawn_interval"] == 2.5

    def test_show_bad_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_config_command(["show", "--format", "toml"]) == 2

    def test_unknown_subcommand(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_config_command(["frobnicate"]) == 2
