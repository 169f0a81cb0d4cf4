"""Unit tests for the gzip-compressed TAR adapter."""

import io
import stat
import tarfile
from pathlib import Path

import pytest
from dirx.archives.base import ArchiveFormat
from dirx.archives.gztar import GzipTarAdapter
from dirx.listing.errors import ArchiveOpenError, ExtractionError


@pytest.fixture
def adapter() -> GzipTarAdapter:
    """Create a GzipTarAdapter instance."""
    return GzipTarAdapter()


@pytest.fixture
def bundle(tmp_path: Path) -> Path:
    """Create a .tar.gz with a directory, two files and a symlink."""
    path = tmp_path / "bundle.tar.gz"
    with tarfile.open(path, "w:gz") as tar:
        folder = tarfile.TarInfo("conf")
        folder.type = tarfile.DIRTYPE
        folder.mode = 0o755
        tar.addfile(folder)

        for name, data, mode in (("conf/app.ini", b"[main]\nkey=value\n", 0o644), ("run.sh", b"#!/bin/sh\n", 0o755)):
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            info.mtime = 1_700_000_000
            tar.addfile(info, io.BytesIO(data))

        link = tarfile.TarInfo("latest")
        link.type = tarfile.SYMTYPE
        link.linkname = "run.sh"
        tar.addfile(link)
    return path


class TestGzipTarEnumerate:
    """Tests for GzipTarAdapter.enumerate method."""

    def test_format(self, adapter: GzipTarAdapter) -> None:
        """Adapter reports the GZIP_TAR format."""
        assert adapter.format == ArchiveFormat.GZIP_TAR

    def test_lists_entries_in_stream_order(self, adapter: GzipTarAdapter, bundle: Path) -> None:
        """Entries come back in physical order."""
        entries = adapter.enumerate(bundle)
        assert [e.name for e in entries] == ["conf", "conf/app.ini", "run.sh", "latest"]
        assert all(e.in_archive and e.path == bundle for e in entries)

    def test_entry_metadata(self, adapter: GzipTarAdapter, bundle: Path) -> None:
        """Type bits, permissions, sizes and link targets are mapped."""
        entries = {e.name: e for e in adapter.enumerate(bundle)}

        assert entries["conf"].is_directory
        assert stat.S_ISDIR(entries["conf"].mode)
        assert entries["run.sh"].mode & 0o777 == 0o755
        assert entries["conf/app.ini"].size == 17
        assert entries["latest"].link_target == "run.sh"
        assert entries["latest"].is_symlink
        assert entries["run.sh"].modified is not None
        assert entries["run.sh"].modified.timestamp() == 1_700_000_000

    def test_not_gzip(self, adapter: GzipTarAdapter, tmp_path: Path) -> None:
        """A file that is not gzip raises ArchiveOpenError."""
        path = tmp_path / "bad.tgz"
        path.write_bytes(b"not gzip at all")
        with pytest.raises(ArchiveOpenError):
            adapter.enumerate(path)

    def test_missing_archive(self, adapter: GzipTarAdapter, tmp_path: Path) -> None:
        """A missing archive raises ArchiveOpenError."""
        with pytest.raises(ArchiveOpenError):
            adapter.enumerate(tmp_path / "missing.tgz")

    def test_truncated_stream(self, adapter: GzipTarAdapter, bundle: Path, tmp_path: Path) -> None:
        """A stream cut off part way raises ArchiveOpenError."""
        truncated = tmp_path / "cut.tgz"
        truncated.write_bytes(bundle.read_bytes()[:40])
        with pytest.raises(ArchiveOpenError):
            adapter.enumerate(truncated)


class TestGzipTarExtractBytes:
    """Tests for GzipTarAdapter.extract_bytes method."""

    def test_full_entry(self, adapter: GzipTarAdapter, bundle: Path) -> None:
        """Extracting with the entry size returns the whole entry."""
        assert adapter.extract_bytes(bundle, "conf/app.ini", 17) == b"[main]\nkey=value\n"

    def test_length_and_offset(self, adapter: GzipTarAdapter, bundle: Path) -> None:
        """Length is capped and the offset skips leading bytes."""
        assert adapter.extract_bytes(bundle, "conf/app.ini", 4) == b"[mai"
        assert adapter.extract_bytes(bundle, "conf/app.ini", 3, offset=7) == b"key"
        for max_length in (0, 5, 17, 50):
            assert len(adapter.extract_bytes(bundle, "conf/app.ini", max_length)) == min(max_length, 17)

    def test_non_file_entries_are_empty(self, adapter: GzipTarAdapter, bundle: Path) -> None:
        """Directories and links have no bytes."""
        assert adapter.extract_bytes(bundle, "conf", 10) == b""
        assert adapter.extract_bytes(bundle, "latest", 10) == b""

    def test_missing_entry(self, adapter: GzipTarAdapter, bundle: Path) -> None:
        """Unknown entry names raise ExtractionError."""
        with pytest.raises(ExtractionError, match="not found"):
            adapter.extract_bytes(bundle, "nope", 10)
