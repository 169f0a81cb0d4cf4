"""Listing domain: entry model, condition evaluation, and traversal.

This module exports the entry model and the error hierarchy.
"""

from dirx.listing.errors import (
    ArchiveAuthError,
    ArchiveError,
    ArchiveOpenError,
    ExtractionError,
    ListingError,
    TempFileError,
    UtilityNotFoundError,
)
from dirx.listing.kinds import FileKind
from dirx.listing.models import Entry, ListingSet, RunTotals

__all__ = [
    "ArchiveAuthError",
    "ArchiveError",
    "ArchiveOpenError",
    "Entry",
    "ExtractionError",
    "FileKind",
    "ListingError",
    "ListingSet",
    "RunTotals",
    "TempFileError",
    "UtilityNotFoundError",
]
