"""Show command: print the commands a script expands to."""

import json
import logging
import sys
from argparse import Namespace

from .run import configure_logging, resolve_commands


logger = logging.getLogger(__name__)


def show_script(args: Namespace) -> int:
    """Print resolved commands on stdout, one per line (or as JSON)."""
    configure_logging(args)

    commands, exit_code = resolve_commands(args.script)
    if commands is None:
        return exit_code

    if args.json:
        json.dump([c.to_dict() for c in commands], sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    for resolved in commands:
        if resolved.task_name is not None:
            print(f"{resolved.task_name}\t{resolved.command}")
        else:
            print(resolved.command)
    return 0
