"""Listing domain models.

This module defines the uniform record for one filesystem or archive
entry, the per-scope accumulator of matched entries, and the running
totals threaded through a traversal.
"""

import stat
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from dirx.listing.kinds import FileKind, classify, extension_of


@dataclass(frozen=True, slots=True)
class Entry:
    """Represents one file or directory, on disk or inside an archive.

    This is an immutable value object. Its kind is classified once at
    construction from ``(is_directory, mode, name)`` and never changes;
    ``dataclasses.replace`` yields a new Entry with the same kind.

    Attributes:
        path: Container path (the directory, or the archive file).
        name: Entry name, possibly including archive subdirectory segments.
        size: Byte length (uncompressed for archive entries).
        modified: Last modification time.
        created: Creation time, or None when the platform cannot supply it.
        accessed: Last access time, or None when unavailable.
        is_directory: Whether the entry is a directory.
        mode: Permission and type bits in ``st_mode`` layout.
        link_target: Symbolic link target; empty for non-links.
        in_archive: True if produced by an archive adapter.
        matched_excerpt: Excerpts collected by a find-all content search.
        kind: Classification, derived at construction.
    """

    path: Path
    name: str
    size: int
    modified: datetime | None
    created: datetime | None = None
    accessed: datetime | None = None
    is_directory: bool = False
    mode: int = 0
    link_target: str = ""
    in_archive: bool = False
    matched_excerpt: str = ""
    kind: FileKind = field(init=False)

    def __post_init__(self) -> None:
        """Validate the entry and classify it."""
        if not self.name:
            msg = "Entry name cannot be empty"
            raise ValueError(msg)
        object.__setattr__(self, "kind", classify(self.is_directory, self.mode, self.name))

    @property
    def extension(self) -> str:
        """Upper-case extension without the dot, or an empty string."""
        return extension_of(self.name)

    @property
    def full_path(self) -> Path:
        """Path of the entry joined onto its container path."""
        return self.path / self.name

    @property
    def is_symlink(self) -> bool:
        """Check if the entry is a symbolic link."""
        return bool(self.link_target) or stat.S_ISLNK(self.mode)

    @property
    def is_hidden(self) -> bool:
        """Check if the entry name starts with a dot."""
        return self.name.startswith(".")

    def timestamp(self, field_name: str) -> datetime | None:
        """Return the timestamp named by ``modified``, ``created``, or ``accessed``."""
        return getattr(self, field_name)


@dataclass
class ListingSet:
    """Accumulator for one traversal scope (a directory or an archive).

    Attributes:
        matched: Entries that satisfied the query.
        subdirs: Subdirectory names eligible for recursion.
        archives: Names of supported archive files to descend into.
        file_count: Number of matched files.
        directory_count: Number of matched directories.
        bytes_found: Total size of matched files.
    """

    matched: list[Entry] = field(default_factory=lambda: [])
    subdirs: list[str] = field(default_factory=lambda: [])
    archives: list[str] = field(default_factory=lambda: [])
    file_count: int = 0
    directory_count: int = 0
    bytes_found: int = 0

    def add(self, entry: Entry) -> None:
        """Append a matched entry and update the running counts."""
        self.matched.append(entry)
        if entry.is_directory:
            self.directory_count += 1
        else:
            self.file_count += 1
            self.bytes_found += entry.size


@dataclass(frozen=True, slots=True)
class RunTotals:
    """Totals accumulated across a whole traversal run.

    Attributes:
        files: Number of matched files.
        bytes: Total size of matched files.
    """

    files: int = 0
    bytes: int = 0

    def add(self, listing: ListingSet) -> "RunTotals":
        """Return new totals including the counts of one scope."""
        return RunTotals(files=self.files + listing.file_count, bytes=self.bytes + listing.bytes_found)
