"""Entry point for the `pulpit` command."""

import sys


def main(args: list[str] | None = None) -> int:
    """Main entry point for the pulpit CLI."""
    if args is None:
        args = sys.argv[1:]

    if not args or args[0] in ["-h", "--help", "help"]:
        print_help()
        return 0

    command = args[0]

    if command == "version":
        print_version()
        return 0
    elif command == "simulate":
        return run_simulate(args[1:])
    elif command == "config":
        return run_config(args[1:])
    else:
        print(f"Unknown command: {command}")
        print_help()
        return 1


def print_help() -> None:
    """Print CLI help message."""
    print(
        """pulpit - Grid platform lifecycle scheduler

Usage:
    python -m pulpit <command> [options]

Commands:
    version     Show version information
    simulate    Run a headless session and print a JSON summary
    config      Configuration management
    help        Show this help message

Options:
    -h, --help  Show help message
"""
    )


def print_version() -> None:
    """Print version information."""
    from pulpit import __version__

    print(f"pulpit {__version__}")


def run_simulate(args: list[str]) -> int:
    """Run the simulate command."""
    from pulpit.cli.simulate import run_simulate_command

    return run_simulate_command(args)


def run_config(args: list[str]) -> int:
    """Run the config command."""
    from pulpit.cli.config import run_config_command

    return run_config_command(args)


if __name__ == "__main__":
    sys.exit(main())
