"""gzip-compressed TAR adapter.

The archive is read as a single forward stream: entries are visited
in physical order, and reaching entry N means decompressing every
entry before it. There is no random access.
"""

import stat
import tarfile
import zlib
from pathlib import Path

from dirx.archives.base import ArchiveAdapter, ArchiveFormat, read_at, timestamp_to_datetime
from dirx.listing.errors import ArchiveOpenError, ExtractionError
from dirx.listing.models import Entry

_STREAM_ERRORS = (OSError, EOFError, tarfile.TarError, zlib.error)


class GzipTarAdapter(ArchiveAdapter):
    """Adapter for .tgz and .tar.gz archives."""

    @property
    def format(self) -> ArchiveFormat:
        """Return GZIP_TAR as the archive format."""
        return ArchiveFormat.GZIP_TAR

    def enumerate(self, archive_path: Path) -> list[Entry]:
        """List every entry in stream order.

        Raises:
            ArchiveOpenError: If the archive cannot be opened or the
                stream is corrupt part way through.
        """
        entries: list[Entry] = []
        with self._open(archive_path) as archive:
            try:
                for member in archive:
                    entries.append(self._to_entry(archive_path, member))
            except _STREAM_ERRORS as e:
                msg = f"Could not read {archive_path}: {e}"
                raise ArchiveOpenError(archive_path, msg) from e
        return entries

    def extract_bytes(
        self,
        archive_path: Path,
        entry_name: str,
        max_length: int,
        offset: int = 0,
    ) -> bytes:
        """Return the bytes of one entry by walking the stream up to it."""
        with self._open(archive_path) as archive:
            try:
                for member in archive:
                    if member.name != entry_name:
                        continue
                    if not member.isfile():
                        return b""
                    stream = archive.extractfile(member)
                    if stream is None:
                        msg = f"{entry_name} in {archive_path} has no data"
                        raise ExtractionError(msg)
                    return read_at(stream, offset, max_length)
            except _STREAM_ERRORS as e:
                msg = f"Could not read {entry_name} from {archive_path}: {e}"
                raise ExtractionError(msg) from e

        msg = f"{entry_name} not found in {archive_path}"
        raise ExtractionError(msg)

    def _open(self, archive_path: Path) -> tarfile.TarFile:
        """Open the archive as a forward-only gzip stream."""
        try:
            return tarfile.open(archive_path, mode="r|gz")
        except _STREAM_ERRORS as e:
            msg = f"Could not open {archive_path}: {e}"
            raise ArchiveOpenError(archive_path, msg) from e

    @staticmethod
    def _to_entry(archive_path: Path, member: tarfile.TarInfo) -> Entry:
        if member.isdir():
            file_type = stat.S_IFDIR
        elif member.issym():
            file_type = stat.S_IFLNK
        else:
            file_type = stat.S_IFREG

        return Entry(
            path=archive_path,
            name=member.name,
            size=member.size,
            modified=timestamp_to_datetime(member.mtime),
            is_directory=member.isdir(),
            mode=file_type | stat.S_IMODE(member.mode),
            link_target=member.linkname if member.issym() else "",
            in_archive=True,
        )
