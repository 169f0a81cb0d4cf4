"""Unit tests for archive format detection and shared adapter helpers."""

import io
from pathlib import Path

import pytest
from dirx.archives import (
    ArchiveFormat,
    GzipTarAdapter,
    SevenZipAdapter,
    ZipAdapter,
    detect_format,
    get_adapter,
)
from dirx.archives.base import read_at, timestamp_to_datetime


class TestDetectFormat:
    """Tests for detect_format function."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("docs.zip", ArchiveFormat.ZIP),
            ("DOCS.ZIP", ArchiveFormat.ZIP),
            ("bundle.tgz", ArchiveFormat.GZIP_TAR),
            ("bundle.tar.gz", ArchiveFormat.GZIP_TAR),
            ("backup.7z", ArchiveFormat.SEVEN_ZIP),
            ("notes.txt", ArchiveFormat.NOT_AN_ARCHIVE),
            ("archive.rar", ArchiveFormat.NOT_AN_ARCHIVE),
            ("zip", ArchiveFormat.NOT_AN_ARCHIVE),
        ],
    )
    def test_by_extension(self, name: str, expected: ArchiveFormat) -> None:
        """Formats are detected from the file extension."""
        assert detect_format(name) == expected

    def test_accepts_paths(self) -> None:
        """Only the final path component is considered."""
        assert detect_format(Path("/backups.zip/data/file.7z")) == ArchiveFormat.SEVEN_ZIP
        assert detect_format(Path("/data.zip/readme")) == ArchiveFormat.NOT_AN_ARCHIVE


class TestGetAdapter:
    """Tests for get_adapter function."""

    def test_returns_adapter_per_format(self) -> None:
        """Each supported format maps to its adapter."""
        assert isinstance(get_adapter(ArchiveFormat.ZIP), ZipAdapter)
        assert isinstance(get_adapter(ArchiveFormat.GZIP_TAR), GzipTarAdapter)
        assert isinstance(get_adapter(ArchiveFormat.SEVEN_ZIP), SevenZipAdapter)

    def test_sevenzip_receives_password(self) -> None:
        """Password and batch size are passed to the 7-Zip adapter."""
        adapter = get_adapter(ArchiveFormat.SEVEN_ZIP, password="secret", batch_bytes=1024)

        assert isinstance(adapter, SevenZipAdapter)
        assert adapter.password == "secret"
        assert adapter.batch_bytes == 1024

    def test_not_an_archive_raises(self) -> None:
        """NOT_AN_ARCHIVE has no adapter."""
        with pytest.raises(ValueError, match="No adapter"):
            get_adapter(ArchiveFormat.NOT_AN_ARCHIVE)


class TestReadAt:
    """Tests for read_at helper."""

    def test_reads_window(self) -> None:
        """Bytes are read from the offset up to the length."""
        assert read_at(io.BytesIO(b"0123456789"), 3, 4) == b"3456"

    def test_short_entry(self) -> None:
        """Reading past the end returns what is left."""
        assert read_at(io.BytesIO(b"0123456789"), 8, 10) == b"89"
        assert read_at(io.BytesIO(b"0123"), 10, 10) == b""

    def test_large_offset_skipped_in_blocks(self) -> None:
        """Offsets larger than one skip block are honored."""
        data = bytes(range(256)) * 1024
        assert read_at(io.BytesIO(data), 200_000, 3) == data[200_000:200_003]


class TestTimestampToDatetime:
    """Tests for timestamp_to_datetime helper."""

    def test_aware_result(self) -> None:
        """Timestamps become timezone-aware datetimes."""
        result = timestamp_to_datetime(1_700_000_000)
        assert result is not None
        assert result.tzinfo is not None
        assert result.timestamp() == 1_700_000_000

    def test_none_and_out_of_range(self) -> None:
        """Missing or unrepresentable timestamps yield None."""
        assert timestamp_to_datetime(None) is None
        assert timestamp_to_datetime(1e20) is None
