"""Direct filesystem enumeration into Entry records."""

import logging
import os
import stat
from pathlib import Path

from dirx.archives.base import timestamp_to_datetime
from dirx.listing.models import Entry

logger = logging.getLogger(__name__)


def entry_from_stat(directory: Path, name: str, info: os.stat_result, link_target: str = "") -> Entry:
    """Build an Entry from an lstat result.

    Args:
        directory: Directory containing the entry.
        name: Entry name.
        info: Result of ``os.lstat`` (symlinks not followed).
        link_target: Symbolic link target, if the entry is a link.

    Returns:
        Entry for the file or directory.
    """
    return Entry(
        path=directory,
        name=name,
        size=info.st_size,
        modified=timestamp_to_datetime(info.st_mtime),
        created=timestamp_to_datetime(getattr(info, "st_birthtime", None)),
        accessed=timestamp_to_datetime(info.st_atime),
        is_directory=stat.S_ISDIR(info.st_mode),
        mode=info.st_mode,
        link_target=link_target,
    )


def read_directory(directory: Path) -> list[Entry]:
    """List the immediate children of a directory.

    Symbolic links are listed as themselves and never followed, so a
    link to a directory is not treated as a directory.

    Args:
        directory: Directory to read.

    Returns:
        Entries in directory order. Unreadable directories yield an
        empty list; unreadable children are skipped.
    """
    entries: list[Entry] = []
    try:
        with os.scandir(directory) as it:
            for dir_entry in it:
                try:
                    info = dir_entry.stat(follow_symlinks=False)
                    link_target = os.readlink(dir_entry.path) if dir_entry.is_symlink() else ""
                except OSError as e:
                    logger.info("Could not read %s: %s", dir_entry.path, e)
                    continue
                entries.append(entry_from_stat(directory, dir_entry.name, info, link_target))
    except OSError as e:
        logger.info("Could not read directory %s: %s", directory, e)
    return entries
