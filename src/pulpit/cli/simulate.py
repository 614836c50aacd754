"""Headless simulation command."""

import argparse
import asyncio
import json
from collections import Counter
from pathlib import Path
from typing import Any

from pulpit.config import Config, load_config, validate_config
from pulpit.core.frame_loop import FrameLoop
from pulpit.core.orchestrator import FrameReport, Orchestrator
from pulpit.schemas.types import GridCoordinate
from pulpit.utils.errors import SimulationError
from pulpit.utils.telemetry import get_logger, setup_logging, start_metrics_server

logger = get_logger(__name__)


class SessionRecorder:
    """Accumulates frame reports and moves a scripted player between cells."""

    def __init__(self, orchestrator: Orchestrator, follow: bool = True):
        self.orchestrator = orchestrator
        self.follow = follow
        self.frames = 0
        self.max_active_seen = orchestrator.active_count
        self.events: Counter[str] = Counter()
        self.outcomes: Counter[str] = Counter()
        self.hops = 0

    def __call__(self, report: FrameReport) -> None:
        self.frames += 1
        self.max_active_seen = max(self.max_active_seen, self.orchestrator.active_count)
        for event in report.events:
            self.events[event["kind"]] += 1
        for outcome in report.outcomes():
            self.outcomes[outcome.value] += 1
        if self.follow:
            self._hop_if_stranded()

    def _hop_if_stranded(self) -> None:
        """Move the player onto the newest cell once its own cell is gone."""
        player_coord = GridCoordinate(*self.orchestrator.player_placement.coord)
        if self.orchestrator.cell_at(player_coord) is not None:
            return
        cells = self.orchestrator.cells
        if not cells:
            return
        self.orchestrator.update_player_position(cells[-1].coord)
        self.hops += 1

    def summary(self) -> dict[str, Any]:
        snapshot = self.orchestrator.snapshot()
        return {
            "session": snapshot.session,
            "frames": self.frames,
            "sim_time": round(snapshot.sim_time, 6),
            "max_active_seen": self.max_active_seen,
            "events": dict(self.events),
            "outcomes": dict(self.outcomes),
            "player_hops": self.hops,
            "final": snapshot.model_dump(mode="json"),
        }


def simulate(
    config: Config,
    seconds: float,
    dt: float,
    follow: bool = True,
) -> dict[str, Any]:
    """Run a fixed-step session and return its summary."""
    orchestrator = Orchestrator(config.game)
    orchestrator.initialize()
    recorder = SessionRecorder(orchestrator, follow=follow)

    steps = int(round(seconds / dt))
    for _ in range(steps):
        recorder(orchestrator.advance(dt))
    return recorder.summary()


async def simulate_realtime(
    config: Config, seconds: float, follow: bool = True
) -> dict[str, Any]:
    """Run a session against the event loop clock and return its summary."""
    orchestrator = Orchestrator(config.game)
    orchestrator.initialize()
    recorder = SessionRecorder(orchestrator, follow=follow)
    frame_loop = FrameLoop(
        orchestrator,
        frame_rate=config.frame_loop.frame_rate,
        max_frame_dt=config.frame_loop.max_frame_dt,
        on_frame=recorder,
    )
    await frame_loop.run_for(seconds)
    return recorder.summary()


def run_simulate_command(args: list[str]) -> int:
    """Run the simulate command with parsed arguments.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = argparse.ArgumentParser(
        prog="pulpit simulate",
        description="Run a headless platform session and print a JSON summary",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="YAML or JSON configuration file",
    )
    parser.add_argument(
        "--seconds",
        type=float,
        default=30.0,
        help="Simulated seconds to run (default: 30)",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=1 / 60,
        help="Fixed frame step in seconds (default: 1/60)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Override the RNG seed",
    )
    parser.add_argument(
        "--no-follow",
        dest="follow",
        action="store_false",
        help="Keep the player on the origin instead of hopping between cells",
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Drive frames from the event loop clock instead of a fixed step",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    try:
        parsed_args = parser.parse_args(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1

    if parsed_args.seconds < 0 or parsed_args.dt <= 0:
        print("Error: --seconds must be >= 0 and --dt must be > 0")
        return 1

    try:
        config = load_config(parsed_args.config)
        if parsed_args.seed is not None:
            game = config.game.model_copy(update={"seed": parsed_args.seed})
            config = config.model_copy(update={"game": game})
        validate_config(config)

        setup_logging(
            "DEBUG" if parsed_args.verbose else config.logging.level,
            json_output=config.logging.format == "json",
        )
        if config.metrics.enabled:
            start_metrics_server(config.metrics.port)

        if parsed_args.realtime:
            summary = asyncio.run(
                simulate_realtime(config, parsed_args.seconds, parsed_args.follow)
            )
        else:
            summary = simulate(
                config, parsed_args.seconds, parsed_args.dt, parsed_args.follow
            )
    except SimulationError as e:
        print(f"Error: {e}")
        return 1

    logger.info(
        "simulation_finished",
        frames=summary["frames"],
        sim_time=summary["sim_time"],
        max_active_seen=summary["max_active_seen"],
    )
    print(json.dumps(summary, indent=2))
    return 0
