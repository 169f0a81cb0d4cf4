"""ZIP archive adapter.

Reads archives through the central directory with the standard
library's zipfile module. Entries are located by exact name.
"""

import logging
import stat
import zipfile
import zlib
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from dirx.archives.base import ArchiveAdapter, ArchiveFormat, read_at
from dirx.listing.errors import ArchiveOpenError, ExtractionError
from dirx.listing.models import Entry, ListingSet

if TYPE_CHECKING:
    from dirx.listing.conditions import ConditionEvaluator

logger = logging.getLogger(__name__)

# Errors zipfile raises while decompressing a member
_READ_ERRORS = (OSError, EOFError, zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError)


class ZipAdapter(ArchiveAdapter):
    """Adapter for ZIP archives.

    Directory entries are listed and flagged but never descended
    into; their children appear as separate entries anyway.
    """

    @property
    def format(self) -> ArchiveFormat:
        """Return ZIP as the archive format."""
        return ArchiveFormat.ZIP

    def enumerate(self, archive_path: Path) -> list[Entry]:
        """List every entry in the archive."""
        with self._open(archive_path) as archive:
            return [self._to_entry(archive_path, info) for info in archive.infolist()]

    def extract_bytes(
        self,
        archive_path: Path,
        entry_name: str,
        max_length: int,
        offset: int = 0,
    ) -> bytes:
        """Return the uncompressed bytes of one entry."""
        with self._open(archive_path) as archive:
            return self._read_member(archive, archive_path, entry_name, max_length, offset)

    def enumerate_and_filter(
        self,
        archive_path: Path,
        evaluator: "ConditionEvaluator",
        *,
        skip_name_mask: bool = False,
    ) -> ListingSet:
        """Filter entries in one pass, reading contents from the open archive.

        Entry bytes are read only when the evaluator reaches the content
        check, so entries rejected by name, size, or date are never
        decompressed.
        """
        listing = ListingSet()
        with self._open(archive_path) as archive:

            def load(entry: Entry) -> bytes:
                return self._read_member(archive, archive_path, entry.name, entry.size)

            for info in archive.infolist():
                entry = self._to_entry(archive_path, info)
                result = evaluator.matches(entry, skip_name_mask=skip_name_mask, loader=load)
                if result.matched:
                    listing.add(result.apply(entry))
        return listing

    def iter_contents(self, archive_path: Path) -> Iterator[tuple[Entry, bytes]]:
        """Yield every file entry together with its full contents.

        Used to unpack ZIP-based documents (Office Open XML), whose
        inner parts are searched as plain byte buffers.

        Args:
            archive_path: Path to the archive file.

        Yields:
            Tuples of (entry, uncompressed bytes) in archive order.

        Raises:
            ArchiveOpenError: If the archive cannot be opened.
            ExtractionError: If a part cannot be read.
        """
        with self._open(archive_path) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                data = self._read_member(archive, archive_path, info.filename, info.file_size)
                yield self._to_entry(archive_path, info), data

    def _open(self, archive_path: Path) -> zipfile.ZipFile:
        """Open the archive, translating failures into ArchiveOpenError."""
        try:
            return zipfile.ZipFile(archive_path)
        except (OSError, zipfile.BadZipFile) as e:
            msg = f"Could not open {archive_path}: {e}"
            raise ArchiveOpenError(archive_path, msg) from e

    def _read_member(
        self,
        archive: zipfile.ZipFile,
        archive_path: Path,
        entry_name: str,
        max_length: int,
        offset: int = 0,
    ) -> bytes:
        try:
            info = archive.getinfo(entry_name)
        except KeyError:
            msg = f"{entry_name} not found in {archive_path}"
            raise ExtractionError(msg) from None

        if info.is_dir():
            return b""

        try:
            with archive.open(info) as stream:
                return read_at(stream, offset, max_length)
        except _READ_ERRORS as e:
            msg = f"Could not read {entry_name} from {archive_path}: {e}"
            raise ExtractionError(msg) from e

    @staticmethod
    def _to_entry(archive_path: Path, info: zipfile.ZipInfo) -> Entry:
        try:
            modified: datetime | None = datetime(*info.date_time).astimezone()
        except ValueError:
            logger.debug("Invalid timestamp on %s in %s", info.filename, archive_path)
            modified = None

        # Unix permission and type bits live in the high word
        mode = info.external_attr >> 16
        is_directory = info.is_dir()
        if is_directory and not stat.S_ISDIR(mode):
            mode |= stat.S_IFDIR

        return Entry(
            path=archive_path,
            name=info.filename,
            size=info.file_size,
            modified=modified,
            is_directory=is_directory,
            mode=mode,
            in_archive=True,
        )
