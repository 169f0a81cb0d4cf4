"""Start-target parsing.

A target on the command line may name a directory, a glob in the
current directory, a directory followed by a glob, or an archive
followed by a glob (``backup.zip/*.txt``).
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from dirx.archives import ArchiveFormat, detect_format

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StartTarget:
    """Where a listing run starts.

    Attributes:
        path: Start directory, or the archive file for archive scope.
        mask: Name glob, or None to match everything.
        is_archive: True if the run starts inside an archive.
    """

    path: Path
    mask: str | None = None
    is_archive: bool = False


def resolve_target(target: str | None, cwd: Path | None = None) -> StartTarget:
    """Split a command-line target into start path and name mask.

    Args:
        target: Target as typed, or None for the current directory.
        cwd: Directory relative targets are resolved against.

    Returns:
        StartTarget for the run.
    """
    base = cwd or Path.cwd()
    if not target:
        return StartTarget(path=base)

    expanded = Path(target).expanduser()
    candidate = expanded if expanded.is_absolute() else base / expanded
    if candidate.is_dir():
        return StartTarget(path=candidate)

    # "backup.zip/" lists the whole archive
    if target.endswith("/") and candidate.is_file() and detect_format(candidate) != ArchiveFormat.NOT_AN_ARCHIVE:
        return StartTarget(path=candidate, is_archive=True)

    parent = candidate.parent
    mask = candidate.name or None
    if "/" not in target.rstrip("/") and not target.startswith("~"):
        logger.debug("Parsed %s to mask in %s", target, base)
        return StartTarget(path=base, mask=target)

    if parent.is_dir():
        logger.debug("Parsed %s to directory %s, mask %s", target, parent, mask)
        return StartTarget(path=parent, mask=mask)

    if parent.is_file() and detect_format(parent) != ArchiveFormat.NOT_AN_ARCHIVE:
        logger.debug("Parsed %s to archive %s, mask %s", target, parent, mask)
        return StartTarget(path=parent, mask=mask, is_archive=True)

    return StartTarget(path=parent, mask=mask)
