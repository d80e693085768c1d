"""CLI command handlers."""

from .run import run_script
from .show import show_script

__all__ = ['run_script', 'show_script']
