"""Archive adapters for the formats dirx can descend into.

The format set is closed: ZIP, gzip-compressed TAR, and 7-Zip. The
format of a file is detected once from its name and mapped to one
adapter implementation.
"""

from pathlib import Path

from dirx.archives.base import ArchiveAdapter, ArchiveFormat
from dirx.archives.gztar import GzipTarAdapter
from dirx.archives.sevenzip import DEFAULT_BATCH_BYTES, SevenZipAdapter
from dirx.archives.zip import ZipAdapter

_FORMATS_BY_EXTENSION: dict[str, ArchiveFormat] = {
    "zip": ArchiveFormat.ZIP,
    "tgz": ArchiveFormat.GZIP_TAR,
    "gz": ArchiveFormat.GZIP_TAR,
    "7z": ArchiveFormat.SEVEN_ZIP,
}


def detect_format(path: Path | str) -> ArchiveFormat:
    """Detect the archive format of a file from its extension.

    ``.tar.gz`` is recognized through its ``gz`` suffix.

    Args:
        path: File path or name.

    Returns:
        The ArchiveFormat, NOT_AN_ARCHIVE for anything unsupported.
    """
    name = Path(path).name
    _, dot, extension = name.rpartition(".")
    if not dot:
        return ArchiveFormat.NOT_AN_ARCHIVE
    return _FORMATS_BY_EXTENSION.get(extension.lower(), ArchiveFormat.NOT_AN_ARCHIVE)


def get_adapter(
    archive_format: ArchiveFormat,
    password: str | None = None,
    batch_bytes: int = DEFAULT_BATCH_BYTES,
) -> ArchiveAdapter:
    """Get the adapter for an archive format.

    Args:
        archive_format: A supported archive format.
        password: Password for encrypted 7-Zip archives.
        batch_bytes: Cap on bytes decoded per 7-Zip extraction pass.

    Returns:
        Adapter instance for the format.

    Raises:
        ValueError: If the format is NOT_AN_ARCHIVE.
    """
    if archive_format == ArchiveFormat.ZIP:
        return ZipAdapter()
    if archive_format == ArchiveFormat.GZIP_TAR:
        return GzipTarAdapter()
    if archive_format == ArchiveFormat.SEVEN_ZIP:
        return SevenZipAdapter(password=password, batch_bytes=batch_bytes)
    msg = f"No adapter for format: {archive_format.value}"
    raise ValueError(msg)


__all__ = [
    "ArchiveAdapter",
    "ArchiveFormat",
    "GzipTarAdapter",
    "SevenZipAdapter",
    "ZipAdapter",
    "detect_format",
    "get_adapter",
]
