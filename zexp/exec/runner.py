"""
Command runner for synthesized experiment commands.
Runs each command without a shell and captures its output to log files.
"""

import logging
import re
import shlex
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..types import ResolvedCommand


logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of running one command."""
    index: int
    task_name: Optional[str]
    command: str
    exit_code: int
    duration_ms: int
    stdout_path: Optional[Path] = None
    stderr_path: Optional[Path] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly summary."""
        result: Dict[str, Any] = {
            "index": self.index,
            "task_name": self.task_name,
            "command": self.command,
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
        }
        if self.stdout_path:
            result["stdout"] = str(self.stdout_path)
        if self.stderr_path:
            result["stderr"] = str(self.stderr_path)
        if self.error:
            result["error"] = self.error
        return result


class CommandRunner:
    """
    Executes resolved commands, serially or with a bounded worker pool.
    """

    # Characters allowed in log file names
    UNSAFE_NAME_PATTERN = re.compile(r'[^A-Za-z0-9._-]+')

    def __init__(
        self,
        workspace: Path,
        logs_dir: Optional[Path] = None,
        jobs: int = 1,
        timeout_sec: Optional[int] = None
    ):
        """
        Initialize command runner.

        Args:
            workspace: Working directory for the commands
            logs_dir: Directory for stdout/stderr logs (default: workspace/logs)
            jobs: Number of commands run concurrently
            timeout_sec: Per-command timeout in seconds
        """
        if jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {jobs}")

        self.workspace = workspace
        self.logs_dir = logs_dir or workspace / "logs"
        self.jobs = jobs
        self.timeout_sec = timeout_sec

    def run(self, commands: Iterable[ResolvedCommand]) -> List[RunResult]:
        """
        Run every command.

        Returns:
            Results in the order the commands were given
        """
        self.logs_dir.mkdir(exist_ok=True, parents=True)

        if self.jobs == 1:
            return [self.run_one(command) for command in commands]

        with ThreadPoolExecutor(max_workers=self.jobs) as pool:
            return list(pool.map(self.run_one, commands))

    def run_one(self, resolved: ResolvedCommand) -> RunResult:
        """Run a single command and write its logs."""
        label = self.log_label(resolved)
        logger.info(f"[{label}] {resolved.command}")

        start_time = time.time()
        error = None

        try:
            # argv mode, no shell
            result = subprocess.run(
                shlex.split(resolved.command),
                cwd=str(self.workspace),
                capture_output=True,
                timeout=self.timeout_sec,
            )
            exit_code = result.returncode
            stdout = result.stdout
            stderr = result.stderr

        except subprocess.TimeoutExpired as e:
            exit_code = 124
            stdout = e.stdout or b""
            stderr = e.stderr or b""
            error = {
                "type": "timeout",
                "message": f"Command timed out after {self.timeout_sec} seconds",
                "context": {"timeout_sec": self.timeout_sec}
            }

        except (OSError, ValueError) as e:
            # Missing executable, permission denied, unbalanced quotes
            exit_code = 1
            stdout = b""
            stderr = str(e).encode('utf-8')
            error = {
                "type": "execution_error",
                "message": str(e),
                "context": {}
            }

        duration_ms = int((time.time() - start_time) * 1000)

        stdout_path = self.logs_dir / f"{label}.stdout"
        stderr_path = self.logs_dir / f"{label}.stderr"
        stdout_path.write_bytes(stdout)
        stderr_path.write_bytes(stderr)

        if exit_code == 0:
            logger.info(f"[{label}] finished in {duration_ms} ms")
        else:
            logger.error(f"[{label}] failed with exit code {exit_code} (see {stderr_path})")

        return RunResult(
            index=resolved.index,
            task_name=resolved.task_name,
            command=resolved.command,
            exit_code=exit_code,
            duration_ms=duration_ms,
            stdout_path=stdout_path,
            stderr_path=stderr_path,
            error=error,
        )

    def log_label(self, resolved: ResolvedCommand) -> str:
        """Log file stem: '<index:04d>-<task name or run>'."""
        name = resolved.task_name or "run"
        name = self.UNSAFE_NAME_PATTERN.sub("_", name).strip("_") or "run"
        return f"{resolved.index:04d}-{name}"
