"""Unit tests for listing models and kind classification.

Tests for Entry, ListingSet, RunTotals and the classify function.
"""

import stat
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest
from dirx.listing.kinds import KIND_SORT_RANK, FileKind, classify, extension_of
from dirx.listing.models import Entry, ListingSet, RunTotals

NOW = datetime(2024, 5, 1, 12, 0).astimezone()


def make_entry(name: str, size: int = 10, **kwargs: object) -> Entry:
    """Create an Entry in /data with sensible defaults."""
    return Entry(path=Path("/data"), name=name, size=size, modified=NOW, **kwargs)  # type: ignore[arg-type]


class TestExtensionOf:
    """Tests for extension_of function."""

    def test_upper_cases_extension(self) -> None:
        """Extensions are returned upper-case without the dot."""
        assert extension_of("report.Pdf") == "PDF"

    def test_last_segment_only(self) -> None:
        """Archive subdirectory segments are ignored."""
        assert extension_of("docs.v2/readme") == ""
        assert extension_of("docs/readme.txt") == "TXT"

    def test_dot_file_has_no_extension(self) -> None:
        """Dot-files have no extension."""
        assert extension_of(".bashrc") == ""


class TestClassify:
    """Tests for classify function."""

    def test_directory_wins(self) -> None:
        """Directories are classified as DIRECTORY whatever their name."""
        assert classify(True, stat.S_IFDIR | 0o755, "backup.zip") == FileKind.DIRECTORY

    def test_execute_bit(self) -> None:
        """Any execute bit makes a file EXECUTABLE."""
        assert classify(False, stat.S_IFREG | 0o744, "build.txt") == FileKind.EXECUTABLE
        assert classify(False, stat.S_IFREG | 0o641, "run") == FileKind.EXECUTABLE

    def test_windows_executable_extension(self) -> None:
        """Windows executable extensions are EXECUTABLE without mode bits."""
        assert classify(False, 0, "setup.EXE") == FileKind.EXECUTABLE
        assert classify(False, 0, "run.bat") == FileKind.EXECUTABLE

    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("song.mp3", FileKind.AUDIO),
            ("backup.tgz", FileKind.ARCHIVE),
            ("photo.JPG", FileKind.IMAGE),
            ("clip.mkv", FileKind.VIDEO),
            ("notes.txt", FileKind.DOCUMENT),
            ("table.csv", FileKind.DATA),
            ("app.toml", FileKind.CONFIG),
            ("main.py", FileKind.CODE),
        ],
    )
    def test_extension_tables(self, name: str, kind: FileKind) -> None:
        """Known extensions map to their kind."""
        assert classify(False, stat.S_IFREG | 0o644, name) == kind

    def test_hidden_without_known_extension(self) -> None:
        """Dot-files with no recognized extension are HIDDEN."""
        assert classify(False, 0o644, ".profile") == FileKind.HIDDEN

    def test_hidden_with_known_extension(self) -> None:
        """A recognized extension takes precedence over the leading dot."""
        assert classify(False, 0o644, ".config.toml") == FileKind.CONFIG

    def test_unknown_extension_is_default(self) -> None:
        """Unrecognized extensions are DEFAULT."""
        assert classify(False, 0o644, "data.qqq") == FileKind.DEFAULT
        assert classify(False, 0o644, "Makefile") == FileKind.DEFAULT

    def test_every_kind_has_a_rank(self) -> None:
        """The type sort ranks every kind."""
        assert set(KIND_SORT_RANK) == set(FileKind)


class TestEntry:
    """Tests for Entry dataclass."""

    def test_kind_set_at_construction(self) -> None:
        """Entry kind is derived from its fields."""
        assert make_entry("notes.txt").kind == FileKind.DOCUMENT
        assert make_entry("sub", is_directory=True).kind == FileKind.DIRECTORY

    def test_classification_is_stable(self) -> None:
        """Classifying the same fields again yields the same kind."""
        entry = make_entry("tool.sh", mode=stat.S_IFREG | 0o755)
        assert classify(entry.is_directory, entry.mode, entry.name) == entry.kind

    def test_replace_keeps_kind(self) -> None:
        """Copying an entry with an excerpt keeps its kind."""
        entry = make_entry("notes.txt")
        copy = replace(entry, matched_excerpt="budget\n")

        assert copy.kind == entry.kind
        assert copy.matched_excerpt == "budget\n"
        assert entry.matched_excerpt == ""

    def test_kind_not_accepted_as_argument(self) -> None:
        """Kind cannot be passed in; it is always derived."""
        with pytest.raises(TypeError):
            Entry(path=Path("/"), name="x", size=0, modified=None, kind=FileKind.CODE)  # type: ignore[call-arg]

    def test_empty_name_rejected(self) -> None:
        """Entry requires a name."""
        with pytest.raises(ValueError, match="name cannot be empty"):
            make_entry("")

    def test_is_immutable(self) -> None:
        """Entry fields cannot be reassigned."""
        entry = make_entry("notes.txt")
        with pytest.raises(AttributeError):
            entry.size = 5  # type: ignore[misc]

    def test_properties(self) -> None:
        """Derived properties reflect the fields."""
        entry = make_entry(".env.sh", link_target="/etc/env")

        assert entry.extension == "SH"
        assert entry.full_path == Path("/data/.env.sh")
        assert entry.is_hidden
        assert entry.is_symlink

    def test_timestamp_lookup(self) -> None:
        """timestamp returns the named field."""
        entry = make_entry("a.txt", accessed=NOW)
        assert entry.timestamp("modified") == NOW
        assert entry.timestamp("accessed") == NOW
        assert entry.timestamp("created") is None


class TestListingSet:
    """Tests for ListingSet accumulator."""

    def test_add_counts_files_and_bytes(self) -> None:
        """Files add to the file count and byte total."""
        listing = ListingSet()
        listing.add(make_entry("a.txt", size=100))
        listing.add(make_entry("b.txt", size=50))

        assert listing.file_count == 2
        assert listing.bytes_found == 150
        assert listing.directory_count == 0

    def test_add_directory_counts_no_bytes(self) -> None:
        """Directories add to the directory count only."""
        listing = ListingSet()
        listing.add(make_entry("sub", size=4096, is_directory=True))

        assert listing.directory_count == 1
        assert listing.file_count == 0
        assert listing.bytes_found == 0


class TestRunTotals:
    """Tests for RunTotals."""

    def test_add_returns_new_totals(self) -> None:
        """add returns updated totals and leaves the original unchanged."""
        listing = ListingSet()
        listing.add(make_entry("a.txt", size=7))
        totals = RunTotals(files=1, bytes=3)

        updated = totals.add(listing)

        assert updated == RunTotals(files=2, bytes=10)
        assert totals == RunTotals(files=1, bytes=3)
