"""7-Zip archive adapter.

Reads archives with py7zr, optionally with a password. A wrong
password is reported as ArchiveAuthError rather than ArchiveOpenError
so that callers can tell the user the password is invalid.

7-Zip archives are usually solid, so reading one entry may mean
decoding every entry stored before it. The fused filter therefore
applies the name, size, and date checks on the header listing first
and decodes only the entries that still need a content check, in a
few large batches.
"""

import logging
import stat
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import py7zr
from py7zr.exceptions import PasswordRequired
from py7zr.io import Py7zIO, WriterFactory

from dirx.archives.base import ArchiveAdapter, ArchiveFormat
from dirx.listing.errors import ArchiveAuthError, ArchiveOpenError, ExtractionError
from dirx.listing.models import Entry, ListingSet

if TYPE_CHECKING:
    from dirx.listing.conditions import ConditionEvaluator

logger = logging.getLogger(__name__)

SIGNATURE = b"7z\xbc\xaf\x27\x1c"
SIGNATURE_HEADER_SIZE = 32
# Coder id of 7zAES (AES-256 + SHA-256)
AES_CODER_ID = b"\x06\xf1\x07\x01"
# Largest encoded header scanned for the AES coder id
_MAX_HEADER_SCAN = 1024 * 1024

DEFAULT_BATCH_BYTES = 64 * 1024 * 1024

def _headers_encrypted(archive_path: Path) -> bool:
    """Check if the archive's header block is AES-encrypted.

    An encrypted header means the archive could not be listed because
    the password is missing or wrong, not because it is corrupt.

    Args:
        archive_path: Path to the archive file.

    Returns:
        True if the encoded header names the 7zAES coder.
    """
    try:
        with open(archive_path, "rb") as f:
            start = f.read(SIGNATURE_HEADER_SIZE)
            if len(start) < SIGNATURE_HEADER_SIZE or not start.startswith(SIGNATURE):
                return False
            next_offset = int.from_bytes(start[12:20], "little")
            next_size = int.from_bytes(start[20:28], "little")
            f.seek(SIGNATURE_HEADER_SIZE + next_offset)
            header = f.read(min(next_size, _MAX_HEADER_SCAN))
    except OSError:
        return False
    return AES_CODER_ID in header


class _CappedSink(Py7zIO):
    """In-memory write target that keeps a bounded window of an entry."""

    def __init__(self, limit: int, offset: int = 0) -> None:
        self._limit = limit
        self._skip = offset
        self._buffer = bytearray()
        self._length = 0

    def write(self, s: bytes | bytearray) -> int:
        data = bytes(s)
        self._length += len(data)
        if self._skip:
            dropped = min(self._skip, len(data))
            data = data[dropped:]
            self._skip -= dropped
        room = self._limit - len(self._buffer)
        if room > 0 and data:
            self._buffer += data[:room]
        return len(s)

    def read(self, size: int | None = None) -> bytes:
        if size is None:
            return bytes(self._buffer)
        return bytes(self._buffer[:size])

    def seek(self, offset: int, whence: int = 0) -> int:
        return offset

    def flush(self) -> None:
        pass

    def size(self) -> int:
        return self._length

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class _SinkFactory(WriterFactory):
    """Creates one capped sink per extracted entry."""

    def __init__(self, limit: int, offset: int = 0) -> None:
        self._limit = limit
        self._offset = offset
        self.sinks: dict[str, _CappedSink] = {}

    def create(self, filename: str) -> Py7zIO:
        sink = _CappedSink(self._limit, self._offset)
        self.sinks[filename] = sink
        return sink

    def contents(self) -> dict[str, bytes]:
        return {name: sink.getvalue() for name, sink in self.sinks.items()}


class SevenZipAdapter(ArchiveAdapter):
    """Adapter for 7-Zip archives.

    Attributes:
        password: Password for encrypted archives, or None.
        batch_bytes: Upper bound on entry bytes decoded per extraction pass.
    """

    def __init__(self, password: str | None = None, batch_bytes: int = DEFAULT_BATCH_BYTES) -> None:
        self.password = password
        self.batch_bytes = batch_bytes

    @property
    def format(self) -> ArchiveFormat:
        """Return SEVEN_ZIP as the archive format."""
        return ArchiveFormat.SEVEN_ZIP

    def enumerate(self, archive_path: Path) -> list[Entry]:
        """List every entry from the archive header."""
        with self._open(archive_path) as archive:
            return [self._to_entry(archive_path, info) for info in archive.list()]

    def extract_bytes(
        self,
        archive_path: Path,
        entry_name: str,
        max_length: int,
        offset: int = 0,
    ) -> bytes:
        """Return the bytes of one entry.

        The entry is decoded into a sink that discards the first
        ``offset`` bytes and keeps at most ``max_length`` after them.
        """
        with self._open(archive_path) as archive:
            if entry_name not in archive.getnames():
                msg = f"{entry_name} not found in {archive_path}"
                raise ExtractionError(msg)
            factory = _SinkFactory(limit=max_length, offset=offset)
            try:
                archive.extract(targets=[entry_name], factory=factory)
            except Exception as e:
                msg = f"Could not read {entry_name} from {archive_path}: {e}"
                raise ExtractionError(msg) from e
        return factory.contents().get(entry_name, b"")

    def enumerate_and_filter(
        self,
        archive_path: Path,
        evaluator: "ConditionEvaluator",
        *,
        skip_name_mask: bool = False,
    ) -> ListingSet:
        """Filter entries, decoding only those that need a content check.

        Entries failing any non-content condition are never decoded.
        Entries above the in-memory size bound are never decoded either
        and fail the content check.
        """
        listing = ListingSet()
        with self._open(archive_path) as archive:
            entries = [self._to_entry(archive_path, info) for info in archive.list()]
            candidates = [e for e in entries if evaluator.prefilter(e, skip_name_mask=skip_name_mask)]

            if not evaluator.searches_content:
                for entry in candidates:
                    listing.add(entry)
                return listing

            max_entry_size = evaluator.settings.max_entry_size
            loadable = [e for e in candidates if not e.is_directory and e.size <= max_entry_size]
            contents: dict[str, bytes] = {}
            for batch in self._batches(loadable):
                contents.update(self._read_batch(archive, archive_path, batch))

        for entry in candidates:
            result = evaluator.match_loaded(entry, contents.get(entry.name))
            if result.matched:
                listing.add(result.apply(entry))
        return listing

    def _open(self, archive_path: Path) -> py7zr.SevenZipFile:
        """Open the archive and verify the password.

        Raises:
            ArchiveAuthError: If the password is missing or wrong.
            ArchiveOpenError: If the archive is missing or corrupt.
        """
        try:
            archive = py7zr.SevenZipFile(archive_path, mode="r", password=self.password)
        except PasswordRequired as e:
            msg = f"Password required for {archive_path}"
            raise ArchiveAuthError(archive_path, msg) from e
        except FileNotFoundError as e:
            msg = f"Could not open {archive_path}: {e}"
            raise ArchiveOpenError(archive_path, msg) from e
        except Exception as e:
            # A wrong key turns the encrypted header into garbage, which py7zr
            # rejects with arbitrary exception types
            if _headers_encrypted(archive_path):
                msg = f"Invalid password for {archive_path}"
                raise ArchiveAuthError(archive_path, msg) from e
            msg = f"Could not open {archive_path}: {e}"
            raise ArchiveOpenError(archive_path, msg) from e

        try:
            self._check_password(archive, archive_path)
        except ArchiveAuthError:
            archive.close()
            raise
        return archive

    def _check_password(self, archive: py7zr.SevenZipFile, archive_path: Path) -> None:
        """Probe-decode the smallest entry of an encrypted archive.

        With a plain header a wrong password still lists fine, so the
        key is verified by decoding one entry before any filtering.
        """
        if not archive.needs_password():
            return
        if self.password is None:
            msg = f"Password required for {archive_path}"
            raise ArchiveAuthError(archive_path, msg)

        files = [info for info in archive.list() if not info.is_directory and info.uncompressed]
        if not files:
            return
        smallest = min(files, key=lambda info: info.uncompressed)
        try:
            archive.extract(targets=[smallest.filename], factory=_SinkFactory(limit=0))
        except Exception as e:
            msg = f"Invalid password for {archive_path}"
            raise ArchiveAuthError(archive_path, msg) from e
        finally:
            archive.reset()

    def _batches(self, entries: list[Entry]) -> Iterator[list[Entry]]:
        batch: list[Entry] = []
        batch_bytes = 0
        for entry in entries:
            if batch and batch_bytes + entry.size > self.batch_bytes:
                yield batch
                batch = []
                batch_bytes = 0
            batch.append(entry)
            batch_bytes += entry.size
        if batch:
            yield batch

    def _read_batch(
        self,
        archive: py7zr.SevenZipFile,
        archive_path: Path,
        batch: list[Entry],
    ) -> dict[str, bytes]:
        """Decode a batch of entries; a failed batch yields no contents."""
        factory = _SinkFactory(limit=max(entry.size for entry in batch))
        try:
            archive.extract(targets=[entry.name for entry in batch], factory=factory)
        except Exception as e:
            logger.info("Could not extract %d entries from %s: %s", len(batch), archive_path, e)
            return {}
        finally:
            archive.reset()
        return factory.contents()

    @staticmethod
    def _to_entry(archive_path: Path, info: "py7zr.FileInfo") -> Entry:
        modified: datetime | None = info.creationtime
        if modified is not None and modified.tzinfo is None:
            modified = modified.astimezone()

        return Entry(
            path=archive_path,
            name=info.filename,
            size=info.uncompressed or 0,
            modified=modified,
            is_directory=info.is_directory,
            mode=stat.S_IFDIR if info.is_directory else 0,
            in_archive=True,
        )
