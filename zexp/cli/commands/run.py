"""Run command implementation."""

import logging
from argparse import Namespace
from pathlib import Path
from typing import List, Optional, Tuple

from zexp.exceptions import ResolutionError, ScriptValidationError
from zexp.exec import CommandRunner
from zexp.resolver import resolve_file
from zexp.types import ResolvedCommand


logger = logging.getLogger(__name__)


def configure_logging(args: Namespace) -> None:
    """Set up root logging from --log-level/--debug/--quiet."""
    log_level = getattr(logging, args.log_level.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def resolve_commands(script: str) -> Tuple[Optional[List[ResolvedCommand]], int]:
    """
    Resolve a script file into its full command list.

    All commands are built before any is returned, so a configuration
    error never leaves a partial list behind.

    Returns:
        Tuple of (commands, exit_code); commands is None on failure
    """
    script_path = Path(script).resolve()
    if not script_path.exists():
        logger.error(f"Script file not found: {script_path}")
        return None, 1

    logger.info(f"Loading script: {script_path}")
    try:
        resolution = resolve_file(script_path)
        commands = list(resolution.commands())
    except ScriptValidationError as e:
        for error in e.errors:
            location = f" at {error.path}" if error.path else ""
            logger.error(f"Validation error{location}: {error.message}")
        return None, e.exit_code
    except ResolutionError as e:
        logger.error(f"Configuration error: {e}")
        return None, e.exit_code

    if resolution.task_name_provider is None:
        logger.debug("No section provides TASK_NAME, runs are labelled by index")

    return commands, 0


def run_script(args: Namespace) -> int:
    """
    Resolve a script and run its commands.

    Returns 0 when every command succeeds (or there is nothing to run),
    1 when a command fails, 2 on configuration errors.
    """
    configure_logging(args)

    try:
        commands, exit_code = resolve_commands(args.script)
        if commands is None:
            return exit_code

        if not commands:
            logger.warning("Nothing to run: the script expands to zero commands")
            return 0

        if args.dry_run:
            for resolved in commands:
                logger.info(f"[DRY RUN] {resolved.task_name or resolved.index}: {resolved.command}")
            return 0

        workspace = Path.cwd()
        logs_dir = Path(args.logs_dir).resolve() if args.logs_dir else None
        runner = CommandRunner(
            workspace=workspace,
            logs_dir=logs_dir,
            jobs=args.jobs,
            timeout_sec=args.timeout
        )
        results = runner.run(commands)

        failed = [r for r in results if not r.succeeded]
        logger.info(f"{len(results) - len(failed)}/{len(results)} command(s) succeeded")
        return 1 if failed else 0

    except ValueError as e:
        logger.error(f"Invalid argument: {e}")
        return 2
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
