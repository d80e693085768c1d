"""
Execution module for zexp.
Runs resolved commands and records their results.
"""

from .runner import CommandRunner, RunResult

__all__ = [
    "CommandRunner",
    "RunResult",
]
