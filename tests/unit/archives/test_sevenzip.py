"""Unit tests for the 7-Zip adapter.

Test archives are written with py7zr itself, with and without a
password and with and without encrypted headers.
"""

# pyright: reportPrivateUsage=false

from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import py7zr
import pytest
from dirx.archives.base import ArchiveFormat
from dirx.archives.sevenzip import SevenZipAdapter, _headers_encrypted
from dirx.core.query import QueryConfig, SearchMode
from dirx.core.settings import SearchSettings
from dirx.listing.conditions import ConditionEvaluator
from dirx.listing.errors import ArchiveAuthError, ArchiveOpenError, ExtractionError
from dirx.listing.models import Entry

FILES = {
    "alpha.txt": b"first file mentions the budget\n",
    "beta.txt": b"second file has nothing\n",
    "nested/gamma.log": b"budget line\nanother line\n",
}


def make_archive(
    tmp_path: Path,
    name: str = "data.7z",
    password: str | None = None,
    header_encryption: bool = False,
    files: dict[str, bytes] | None = None,
) -> Path:
    """Write a 7z archive containing the given files."""
    source = tmp_path / f"{name}.src"
    source.mkdir()
    path = tmp_path / name
    with py7zr.SevenZipFile(path, "w", password=password, header_encryption=header_encryption) as archive:
        for arcname, data in (files or FILES).items():
            file_path = source / arcname.replace("/", "_")
            file_path.write_bytes(data)
            archive.write(file_path, arcname)
    return path


class TestSevenZipEnumerate:
    """Tests for SevenZipAdapter.enumerate method."""

    def test_format(self) -> None:
        """Adapter reports the SEVEN_ZIP format."""
        assert SevenZipAdapter().format == ArchiveFormat.SEVEN_ZIP

    def test_plain_archive(self, tmp_path: Path) -> None:
        """Unencrypted archives list without a password."""
        path = make_archive(tmp_path)

        entries = SevenZipAdapter().enumerate(path)

        by_name = {e.name: e for e in entries}
        assert set(by_name) == set(FILES)
        assert by_name["alpha.txt"].size == len(FILES["alpha.txt"])
        assert all(e.in_archive and e.path == path for e in entries)

    def test_timestamps_are_aware(self, tmp_path: Path) -> None:
        """Entry times carry a timezone."""
        path = make_archive(tmp_path)

        for entry in SevenZipAdapter().enumerate(path):
            if entry.modified is not None:
                assert isinstance(entry.modified, datetime)
                assert entry.modified.tzinfo is not None

    def test_missing_archive(self, tmp_path: Path) -> None:
        """A missing archive raises ArchiveOpenError."""
        with pytest.raises(ArchiveOpenError):
            SevenZipAdapter().enumerate(tmp_path / "missing.7z")

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        """A file that is not a 7z archive raises ArchiveOpenError."""
        path = tmp_path / "bad.7z"
        path.write_bytes(b"definitely not seven zip")
        with pytest.raises(ArchiveOpenError):
            SevenZipAdapter().enumerate(path)


class TestSevenZipPasswords:
    """Tests for encrypted archives."""

    @pytest.mark.parametrize("header_encryption", [True, False])
    def test_wrong_password_is_auth_error(self, tmp_path: Path, header_encryption: bool) -> None:
        """A wrong password raises ArchiveAuthError, not ArchiveOpenError."""
        path = make_archive(tmp_path, password="secret", header_encryption=header_encryption)

        with pytest.raises(ArchiveAuthError) as exc_info:
            SevenZipAdapter(password="wrong").enumerate(path)
        assert exc_info.value.path == path

    @pytest.mark.parametrize("header_encryption", [True, False])
    def test_missing_password_is_auth_error(self, tmp_path: Path, header_encryption: bool) -> None:
        """An encrypted archive without a password raises ArchiveAuthError."""
        path = make_archive(tmp_path, password="secret", header_encryption=header_encryption)

        with pytest.raises(ArchiveAuthError):
            SevenZipAdapter().enumerate(path)

    @pytest.mark.parametrize("header_encryption", [True, False])
    def test_correct_password_enumerates(self, tmp_path: Path, header_encryption: bool) -> None:
        """The correct password lists every entry."""
        path = make_archive(tmp_path, password="secret", header_encryption=header_encryption)

        entries = SevenZipAdapter(password="secret").enumerate(path)

        assert {e.name for e in entries} == set(FILES)

    def test_garbled_encrypted_header_is_auth_error(self, tmp_path: Path) -> None:
        """Any error parsing an encrypted header means a bad password."""
        path = make_archive(tmp_path, password="secret", header_encryption=True)

        with (
            patch("dirx.archives.sevenzip.py7zr.SevenZipFile", side_effect=TypeError("Unknown field: b'\\x8f'")),
            pytest.raises(ArchiveAuthError),
        ):
            SevenZipAdapter(password="wrong").enumerate(path)

    def test_garbled_plain_header_is_open_error(self, tmp_path: Path) -> None:
        """Unexpected errors on a plain header mean a corrupt archive."""
        path = make_archive(tmp_path)

        with (
            patch("dirx.archives.sevenzip.py7zr.SevenZipFile", side_effect=TypeError("Unknown field")),
            pytest.raises(ArchiveOpenError),
        ):
            SevenZipAdapter().enumerate(path)

    def test_failed_decode_while_checking_password(self, tmp_path: Path) -> None:
        """Any decode failure during the password check is an auth error."""
        path = make_archive(tmp_path, password="secret")

        with (
            patch.object(py7zr.SevenZipFile, "extract", side_effect=TypeError("garbage")),
            pytest.raises(ArchiveAuthError),
        ):
            SevenZipAdapter(password="secret").enumerate(path)

    def test_correct_password_extracts(self, tmp_path: Path) -> None:
        """Entry bytes decrypt with the correct password."""
        path = make_archive(tmp_path, password="secret", header_encryption=True)

        data = SevenZipAdapter(password="secret").extract_bytes(path, "beta.txt", 100)

        assert data == FILES["beta.txt"]

    def test_headers_encrypted_detection(self, tmp_path: Path) -> None:
        """Encrypted headers are recognized from the file."""
        encrypted = make_archive(tmp_path, name="enc.7z", password="secret", header_encryption=True)
        plain = make_archive(tmp_path, name="plain.7z")

        assert _headers_encrypted(encrypted)
        assert not _headers_encrypted(plain)
        assert not _headers_encrypted(tmp_path / "missing.7z")


class TestSevenZipExtractBytes:
    """Tests for SevenZipAdapter.extract_bytes method."""

    def test_full_entry(self, tmp_path: Path) -> None:
        """Extracting with the entry size returns the whole entry."""
        path = make_archive(tmp_path)
        data = SevenZipAdapter().extract_bytes(path, "nested/gamma.log", len(FILES["nested/gamma.log"]))
        assert data == FILES["nested/gamma.log"]

    def test_length_and_offset(self, tmp_path: Path) -> None:
        """Length is capped and the offset skips leading bytes."""
        path = make_archive(tmp_path)
        adapter = SevenZipAdapter()
        size = len(FILES["alpha.txt"])

        for max_length in (0, 5, size, size + 10):
            assert len(adapter.extract_bytes(path, "alpha.txt", max_length)) == min(max_length, size)
        assert adapter.extract_bytes(path, "alpha.txt", 4, offset=6) == b"file"

    def test_missing_entry(self, tmp_path: Path) -> None:
        """Unknown entry names raise ExtractionError."""
        path = make_archive(tmp_path)
        with pytest.raises(ExtractionError, match="not found"):
            SevenZipAdapter().extract_bytes(path, "nope.txt", 10)


class TestSevenZipFilter:
    """Tests for SevenZipAdapter.enumerate_and_filter method."""

    def test_filters_by_content(self, tmp_path: Path) -> None:
        """Only entries with matching content are kept."""
        path = make_archive(tmp_path)
        evaluator = ConditionEvaluator(QueryConfig(search_mode=SearchMode.CASE, search_text="budget"))

        listing = SevenZipAdapter().enumerate_and_filter(path, evaluator)

        assert sorted(e.name for e in listing.matched) == ["alpha.txt", "nested/gamma.log"]

    def test_excerpts_in_find_all_mode(self, tmp_path: Path) -> None:
        """Find-all excerpts are attached to archive entries."""
        path = make_archive(tmp_path)
        query = QueryConfig(search_mode=SearchMode.CASE, search_text="budget", find_all=True, name_mask="*.log")
        evaluator = ConditionEvaluator(query)

        listing = SevenZipAdapter().enumerate_and_filter(path, evaluator)

        (entry,) = listing.matched
        assert entry.matched_excerpt == "budget line\n"

    def test_without_content_query_nothing_is_decoded(self, tmp_path: Path) -> None:
        """Metadata-only queries never extract entry bytes."""
        path = make_archive(tmp_path)
        evaluator = ConditionEvaluator(QueryConfig(name_mask="*.txt"))

        with patch.object(SevenZipAdapter, "_read_batch") as mock_read:
            listing = SevenZipAdapter().enumerate_and_filter(path, evaluator)

        mock_read.assert_not_called()
        assert sorted(e.name for e in listing.matched) == ["alpha.txt", "beta.txt"]

    def test_prefiltered_entries_are_not_decoded(self, tmp_path: Path) -> None:
        """Entries failing the glob or the size bound are never extracted."""
        files = {"small.txt": b"budget\n", "other.md": b"budget\n", "large.txt": b"budget" + b"." * 5000}
        path = make_archive(tmp_path, files=files)
        query = QueryConfig(
            search_mode=SearchMode.CASE,
            search_text="budget",
            name_mask="*.txt",
            settings=SearchSettings(max_entry_size=1000),
        )
        evaluator = ConditionEvaluator(query)
        original = SevenZipAdapter._read_batch

        with patch.object(SevenZipAdapter, "_read_batch", autospec=True, side_effect=original) as mock_read:
            listing = SevenZipAdapter().enumerate_and_filter(path, evaluator)

        decoded = [entry.name for call in mock_read.call_args_list for entry in call.args[3]]
        assert decoded == ["small.txt"]
        assert [e.name for e in listing.matched] == ["small.txt"]

    def test_skip_name_mask(self, tmp_path: Path) -> None:
        """skip_name_mask lists entries the glob would reject."""
        path = make_archive(tmp_path)
        evaluator = ConditionEvaluator(QueryConfig(name_mask="*.7z"))

        listing = SevenZipAdapter().enumerate_and_filter(path, evaluator, skip_name_mask=True)

        assert len(listing.matched) == 3


class TestBatches:
    """Tests for extraction batching."""

    def _entry(self, name: str, size: int) -> Entry:
        return Entry(path=Path("a.7z"), name=name, size=size, modified=None, in_archive=True)

    def test_batches_respect_byte_limit(self) -> None:
        """Batches close before exceeding the byte limit."""
        adapter = SevenZipAdapter(batch_bytes=100)
        entries = [self._entry("a", 60), self._entry("b", 30), self._entry("c", 20), self._entry("d", 100)]

        batches = [[e.name for e in batch] for batch in adapter._batches(entries)]

        assert batches == [["a", "b"], ["c"], ["d"]]

    def test_oversized_entry_gets_its_own_batch(self) -> None:
        """An entry larger than the limit is still extracted, alone."""
        adapter = SevenZipAdapter(batch_bytes=10)
        entries = [self._entry("big", 50), self._entry("small", 1)]

        batches = [[e.name for e in batch] for batch in adapter._batches(entries)]

        assert batches == [["big"], ["small"]]

    def test_filter_with_small_batches(self, tmp_path: Path) -> None:
        """Results do not depend on the batch size."""
        path = make_archive(tmp_path)
        evaluator = ConditionEvaluator(QueryConfig(search_mode=SearchMode.CASE, search_text="budget"))

        listing = SevenZipAdapter(batch_bytes=1).enumerate_and_filter(path, evaluator)

        assert sorted(e.name for e in listing.matched) == ["alpha.txt", "nested/gamma.log"]
