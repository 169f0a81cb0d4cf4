"""Abstract base class for archive adapters.

This module defines the ArchiveAdapter interface that every supported
archive format implements, plus helpers shared by the adapters.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import IO, TYPE_CHECKING

from dirx.listing.models import Entry, ListingSet

if TYPE_CHECKING:
    from dirx.listing.conditions import ConditionEvaluator

# Block size used when discarding bytes to reach an offset.
_SKIP_BLOCK = 64 * 1024


class ArchiveFormat(str, Enum):
    """Archive formats dirx can descend into.

    Attributes:
        ZIP: ZIP with a central directory.
        GZIP_TAR: TAR stream compressed with gzip (.tgz, .tar.gz).
        SEVEN_ZIP: 7-Zip, optionally password-protected.
        NOT_AN_ARCHIVE: Anything else; listed as an ordinary file.
    """

    ZIP = "zip"
    GZIP_TAR = "gztar"
    SEVEN_ZIP = "7z"
    NOT_AN_ARCHIVE = "none"


def timestamp_to_datetime(value: float | None) -> datetime | None:
    """Convert a POSIX timestamp to an aware local datetime.

    Args:
        value: Seconds since the epoch, or None.

    Returns:
        Aware datetime, or None if the value is missing or out of range.
    """
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(value).astimezone()
    except (OverflowError, OSError, ValueError):
        return None


def read_at(stream: IO[bytes], offset: int, max_length: int) -> bytes:
    """Read up to ``max_length`` bytes at ``offset`` from a forward-only stream.

    Leading bytes are decompressed and discarded rather than seeked
    over, so this works on streams that cannot seek.

    Args:
        stream: Readable binary stream positioned at the entry start.
        offset: Number of leading bytes to skip.
        max_length: Maximum number of bytes to return.

    Returns:
        The bytes read; shorter than max_length if the entry ends first.
    """
    remaining = offset
    while remaining > 0:
        skipped = stream.read(min(remaining, _SKIP_BLOCK))
        if not skipped:
            return b""
        remaining -= len(skipped)

    parts: list[bytes] = []
    wanted = max_length
    while wanted > 0:
        block = stream.read(wanted)
        if not block:
            break
        parts.append(block)
        wanted -= len(block)
    return b"".join(parts)


class ArchiveAdapter(ABC):
    """Abstract base class for all archive adapters.

    Adapters translate one archive format into Entry records and give
    bounded access to the uncompressed bytes of a named entry. Every
    Entry they produce has ``in_archive`` set and ``path`` equal to the
    archive file.

    Example:
        >>> adapter = get_adapter(ArchiveFormat.ZIP)
        >>> for entry in adapter.enumerate(Path("docs.zip")):
        ...     print(entry.name, entry.size)
    """

    @property
    @abstractmethod
    def format(self) -> ArchiveFormat:
        """Return the archive format this adapter handles."""

    @abstractmethod
    def enumerate(self, archive_path: Path) -> list[Entry]:
        """List every entry in the archive.

        Args:
            archive_path: Path to the archive file.

        Returns:
            Entries in archive order.

        Raises:
            ArchiveOpenError: If the archive is missing, corrupt, or not of this format.
            ArchiveAuthError: If the archive is encrypted and cannot be decrypted.
        """

    @abstractmethod
    def extract_bytes(
        self,
        archive_path: Path,
        entry_name: str,
        max_length: int,
        offset: int = 0,
    ) -> bytes:
        """Return the uncompressed bytes of one entry.

        Args:
            archive_path: Path to the archive file.
            entry_name: Exact name of the entry, as enumerated.
            max_length: Maximum number of bytes to return.
            offset: Number of leading bytes to skip.

        Returns:
            Up to max_length bytes of the entry starting at offset.

        Raises:
            ArchiveError: If the archive cannot be opened.
            ExtractionError: If the entry is missing or cannot be read.
        """

    def enumerate_and_filter(
        self,
        archive_path: Path,
        evaluator: "ConditionEvaluator",
        *,
        skip_name_mask: bool = False,
    ) -> ListingSet:
        """Enumerate the archive and keep the entries that match the query.

        The base implementation enumerates first and loads entry bytes
        on demand, one entry at a time. Adapters that can read entries
        from an already open archive override this.

        Args:
            archive_path: Path to the archive file.
            evaluator: Condition evaluator for the current query.
            skip_name_mask: Skip the name glob (the archive name already matched it).

        Returns:
            ListingSet with the matched entries.

        Raises:
            ArchiveError: If the archive cannot be opened.
        """
        listing = ListingSet()
        load = self._loader(archive_path)
        for entry in self.enumerate(archive_path):
            result = evaluator.matches(entry, skip_name_mask=skip_name_mask, loader=load)
            if result.matched:
                listing.add(result.apply(entry))
        return listing

    def _loader(self, archive_path: Path) -> Callable[[Entry], bytes]:
        def load(entry: Entry) -> bytes:
            return self.extract_bytes(archive_path, entry.name, entry.size)

        return load
