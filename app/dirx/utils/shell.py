"""Running external utilities.

dirx shells out for PDF text extraction. Utilities are looked up next
to the running program first, then on PATH.
"""

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output and exit code of a finished process."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_command(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
    """Run a program to completion and capture its output.

    Output is decoded as UTF-8 with undecodable bytes replaced, since
    converted documents are not guaranteed to be valid text.

    Args:
        args: Program and its arguments.
        timeout: Seconds to wait before giving up, or None to wait forever.

    Raises:
        subprocess.TimeoutExpired: If the program runs past the timeout.
        OSError: If the program cannot be started.
    """
    completed = subprocess.run(
        args,
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        check=False,
    )
    return CommandResult(stdout=completed.stdout, stderr=completed.stderr, returncode=completed.returncode)


def program_dir() -> Path:
    """Directory containing the running program."""
    return Path(sys.argv[0]).resolve().parent


def resolve_command(name: str) -> Path | None:
    """Locate a command next to the running program or on PATH.

    The directory of the running program is checked first so that a
    utility shipped alongside dirx wins over a system-wide install.

    Args:
        name: Command name to resolve.

    Returns:
        Path to the command, or None if it cannot be found.
    """
    candidate = program_dir() / name
    try:
        if candidate.is_file():
            logger.debug("Found %s at %s", name, candidate)
            return candidate
    except OSError as e:
        logger.info("Found but could not open %s: %s", candidate, e)

    found = shutil.which(name)
    if found is not None:
        logger.debug("Found %s at %s", name, found)
        return Path(found)

    return None
