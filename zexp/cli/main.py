"""Main CLI entry point for zexp."""

import argparse
import sys
from typing import Optional

from .commands import run_script, show_script


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='info',
        help='Set log level'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the zexp CLI."""
    parser = argparse.ArgumentParser(
        prog='zexp',
        description='Run parameterized benchmarking experiments'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run an experiment script')
    run_parser.add_argument(
        'script',
        type=str,
        help='Path to the experiment script (TOML or YAML)'
    )
    run_parser.add_argument(
        '-j', '--jobs',
        type=int,
        default=1,
        help='Number of commands to run concurrently'
    )
    run_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Resolve and print commands without executing them'
    )
    run_parser.add_argument(
        '--logs-dir',
        type=str,
        help='Directory for command stdout/stderr (default: ./logs)'
    )
    run_parser.add_argument(
        '--timeout',
        type=int,
        help='Per-command timeout in seconds'
    )
    add_logging_arguments(run_parser)

    # Show command
    show_parser = subparsers.add_parser('show', help='Print the commands a script expands to')
    show_parser.add_argument(
        'script',
        type=str,
        help='Path to the experiment script (TOML or YAML)'
    )
    show_parser.add_argument(
        '--json',
        action='store_true',
        help='Print commands as a JSON array'
    )
    add_logging_arguments(show_parser)

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'run':
        return run_script(parsed_args)
    elif parsed_args.command == 'show':
        return show_script(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
