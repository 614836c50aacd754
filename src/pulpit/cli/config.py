"""Configuration commands: check a game setup and print the merged config."""

import argparse
import json
from pathlib import Path
from typing import Any

import yaml

from pulpit.config import Config, load_config, validate_config
from pulpit.core.cell import EARLY_WARNING_FRACTION
from pulpit.core.orchestrator import Orchestrator
from pulpit.utils.errors import InvalidConfiguration
from pulpit.utils.telemetry import setup_logging


def session_preview(config: Config) -> dict[str, Any]:
    """Start a throwaway session and describe how it begins."""
    orchestrator = Orchestrator(config.game)
    orchestrator.initialize()
    return {
        "origin": tuple(orchestrator.origin_coord),
        "initial_cells": [tuple(cell.coord) for cell in orchestrator.cells],
        "floor": orchestrator.floor,
        "max_active_cells": orchestrator.max_active_cells,
    }


def chain_warnings(config: Config) -> list[str]:
    """Settings that pass validation but keep platforms from overlapping."""
    game = config.game
    warnings = []

    if game.initial_fill_count > game.max_active_cells:
        warnings.append(
            f"initial_fill_count {game.initial_fill_count} is clamped to "
            f"max_active_cells {game.max_active_cells}"
        )
    if game.max_active_cells == 1:
        warnings.append(
            "max_active_cells is 1: scheduled neighbors are always rejected "
            "and only corrective spawns move the chain"
        )

    # Time between a cell's early warning and its expiry
    lead = game.min_lifetime * EARLY_WARNING_FRACTION
    if game.spawn_interval >= lead:
        warnings.append(
            f"spawn_interval {game.spawn_interval}s is not shorter than "
            f"{lead:.2f}s, the warning lead of the shortest-lived cell: "
            "its neighbor appears only after it expires"
        )
    return warnings


def config_validate_command(parsed_args: argparse.Namespace) -> int:
    """Validate the merged file and environment configuration."""
    source = str(parsed_args.config) if parsed_args.config else "defaults"
    print(f"Validating configuration: {source} + environment")

    try:
        config = load_config(parsed_args.config)
        validate_config(config)
        setup_logging(
            config.logging.level, json_output=config.logging.format == "json"
        )
        preview = session_preview(config)
    except InvalidConfiguration as e:
        print(f"✗ Configuration validation failed: {e}")
        return 1

    print("✓ Configuration is valid")
    print(f"  origin: {preview['origin']}")
    print(
        "  initial cells: "
        + ", ".join(str(coord) for coord in preview["initial_cells"])
    )
    print(f"  refill floor: {preview['floor']} of {preview['max_active_cells']}")

    warnings = chain_warnings(config)
    for warning in warnings:
        print(f"! {warning}")
    if warnings and parsed_args.strict:
        print("✗ Warnings are errors with --strict")
        return 1
    return 0


def config_show_command(parsed_args: argparse.Namespace) -> int:
    """Print the merged configuration."""
    try:
        config = load_config(parsed_args.config)
    except InvalidConfiguration as e:
        print(f"Error loading configuration: {e}")
        return 1

    config_dict = config.model_dump(mode="json")
    if parsed_args.format == "json":
        print(json.dumps(config_dict, indent=2))
    else:
        print(yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=True))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pulpit config",
        description="Check and print pulpit configuration",
        epilog="Environment variables (PULPIT_*) override file values.",
    )
    subparsers = parser.add_subparsers(dest="command")

    validate = subparsers.add_parser(
        "validate",
        help="Validate configuration and preview the first session",
    )
    validate.add_argument(
        "config",
        nargs="?",
        type=Path,
        help="YAML or JSON configuration file",
    )
    validate.add_argument(
        "--strict",
        action="store_true",
        help="Fail when the settings would break the platform chain",
    )

    show = subparsers.add_parser("show", help="Print the merged configuration")
    show.add_argument(
        "config",
        nargs="?",
        type=Path,
        help="YAML or JSON configuration file",
    )
    show.add_argument(
        "--format",
        "-f",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    return parser


def run_config_command(args: list[str]) -> int:
    """Run configuration management commands.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success, 1 for error, 2 for bad arguments)
    """
    parser = build_parser()
    if not args or args[0] == "help":
        parser.print_help()
        return 0

    try:
        parsed_args = parser.parse_args(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1

    if parsed_args.command == "validate":
        return config_validate_command(parsed_args)
    if parsed_args.command == "show":
        return config_show_command(parsed_args)
    parser.print_help()
    return 1
