"""Subprocess helpers for the package manager front-ends.

Queries run captured under a fixed locale so their output parses the same
everywhere; mutations run attached to the terminal.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Untranslated messages and "." decimals, UTF-8 package descriptions
QUERY_LOCALE = "C.UTF-8"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of a finished query.

    Attributes:
        stdout: Standard output, decoded as text.
        stderr: Standard error, decoded as text.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


def _query_env() -> dict[str, str]:
    return {**os.environ, "LC_ALL": QUERY_LOCALE}


def run_command(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
    """Run a read-only command and capture its output.

    A non-zero exit is not an error here; callers inspect ``returncode``.

    Args:
        args: Command and arguments to execute.
        timeout: Seconds to wait before giving up, None to wait forever.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.TimeoutExpired: If the command exceeds ``timeout``.
        FileNotFoundError: If the executable is not found.
    """
    logger.debug("Query: %s", " ".join(args))
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
        timeout=timeout,
        env=_query_env(),
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(name) is not None


def run_interactive(args: list[str]) -> int:
    """Run a command on the user's terminal and wait for it.

    Output is not captured, so the package manager's progress and any
    privilege prompt reach the user. The user's locale is kept.

    Returns:
        Exit code of the command.

    Raises:
        FileNotFoundError: If the executable is not found.
        OSError: If the command cannot be executed.
    """
    logger.debug("Interactive: %s", " ".join(args))
    return subprocess.run(args, check=False).returncode
