"""
External tool invocation for QtKit.

Every child process QtKit starts (curl, tar, configure, make, qmake and the
binding generator) goes through ToolRunner, which returns a ToolResult
instead of raising on non-zero exit. Callers decide what an exit code means,
using ExitPolicy for the retry classification.

Usage:
    from qtkit.core.process import ToolRunner, CURL_POLICY

    runner = ToolRunner()
    result = runner.run(["tar", "-C", "/cache", "-xaf", "qt.tar.xz"])
    if not result.success:
        ...

    outcome = CURL_POLICY.classify(result.exit_code)
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Union

logger = logging.getLogger(__name__)

# Shell conventions for executables that cannot be started
COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class ToolResult:
    """
    Result of running an external tool.

    Attributes:
        command: Command line that was executed
        exit_code: Process exit status (127 if the executable was not found,
            126 if it could not be executed)
        stdout: Captured standard output (empty unless captured)
        stderr: Captured standard error (empty unless captured)
    """

    command: tuple
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        """True if the tool exited with status 0."""
        return self.exit_code == 0


class Outcome(Enum):
    """Classification of a tool exit code."""

    SUCCESS = "success"
    RETRY = "retry"
    FATAL = "fatal"


@dataclass(frozen=True)
class ExitPolicy:
    """
    Retry policy for an external tool.

    Attributes:
        retryable: Exit codes that indicate a transient failure
        max_attempts: Total number of attempts, including the first one
    """

    retryable: FrozenSet[int] = frozenset()
    max_attempts: int = 1

    def classify(self, exit_code: int) -> Outcome:
        """
        Classify an exit code.

        Args:
            exit_code: Tool exit status

        Returns:
            Outcome.SUCCESS for 0, Outcome.RETRY for a retryable code,
            Outcome.FATAL otherwise
        """
        if exit_code == 0:
            return Outcome.SUCCESS
        if exit_code in self.retryable:
            return Outcome.RETRY
        return Outcome.FATAL


# curl: 18 = partial file (transfer closed early), 56 = failure receiving
# network data (connection reset by peer)
CURL_POLICY = ExitPolicy(retryable=frozenset({18, 56}), max_attempts=3)


class ToolRunner:
    """
    Runs external tools synchronously.

    Output is passed through to the terminal unless capture is requested, so
    long-running tools (curl, configure) show their own progress.
    """

    def run(
        self,
        command: List[Union[str, Path]],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        capture: bool = False,
    ) -> ToolResult:
        """
        Run a command and wait for it to exit.

        Args:
            command: Executable and arguments
            cwd: Working directory (default: current directory)
            env: Variables merged over the current process environment
            capture: Capture stdout/stderr instead of inheriting them

        Returns:
            ToolResult describing the exit status and captured output
        """
        cmd = [str(part) for part in command]
        logger.debug(f"Running: {' '.join(cmd)}")
        if cwd is not None:
            logger.debug(f"Working directory: {cwd}")

        full_env = None
        if env:
            full_env = os.environ.copy()
            full_env.update(env)

        try:
            completed = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                env=full_env,
                capture_output=capture,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            logger.debug(f"Executable not found: {e}")
            return ToolResult(
                command=tuple(cmd), exit_code=COMMAND_NOT_FOUND, stderr=str(e)
            )
        except OSError as e:
            logger.debug(f"Cannot execute {cmd[0]}: {e}")
            return ToolResult(
                command=tuple(cmd), exit_code=COMMAND_NOT_EXECUTABLE, stderr=str(e)
            )

        result = ToolResult(
            command=tuple(cmd),
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        logger.debug(f"Exit code {result.exit_code}: {cmd[0]}")
        return result
