"""Condition evaluator.

Decides whether one Entry satisfies the query. Checks run cheapest
first and stop at the first failure:

1. file/directory inclusion flags
2. extension exclude and include lists
3. hidden-name filter
4. date bounds on the active timestamp
5. size bounds
6. name glob
7. content search (directories always fail)
8. executable-only filter
"""

import logging
import os
import stat
from collections.abc import Callable
from fnmatch import fnmatchcase

from dirx.archives import ArchiveFormat, detect_format
from dirx.core.query import QueryConfig
from dirx.core.settings import SearchSettings
from dirx.listing.errors import ListingError
from dirx.listing.kinds import WINDOWS_EXECUTABLE_EXTENSIONS
from dirx.listing.models import Entry
from dirx.search.content import ContentSearcher
from dirx.search.matcher import MATCH, NO_MATCH, SearchResult

logger = logging.getLogger(__name__)

_EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

EntryLoader = Callable[[Entry], bytes]


class ConditionEvaluator:
    """Pure predicate over an Entry and the immutable query.

    Attributes:
        query: Query for the whole run.
        searcher: Content searcher, present only when a content query is set.
    """

    def __init__(
        self,
        query: QueryConfig,
        searcher: ContentSearcher | None = None,
        *,
        windows: bool | None = None,
    ) -> None:
        self.query = query
        if searcher is None and query.pattern is not None:
            searcher = ContentSearcher(query.pattern, find_all=query.find_all, settings=query.settings)
        self.searcher = searcher if query.has_content_query else None
        self._windows = os.name == "nt" if windows is None else windows

    @property
    def settings(self) -> SearchSettings:
        """Search tuning constants of the query."""
        return self.query.settings

    @property
    def searches_content(self) -> bool:
        """Check if entries need a content check."""
        return self.query.has_content_query

    def matches(
        self,
        entry: Entry,
        *,
        skip_name_mask: bool = False,
        loader: EntryLoader | None = None,
    ) -> SearchResult:
        """Evaluate every condition against an entry.

        Args:
            entry: Entry to check.
            skip_name_mask: Skip the glob for archive entries whose
                archive name already matched it.
            loader: Returns the bytes of an archive entry; required to
                search the content of archive entries.

        Returns:
            SearchResult; excerpts are set in find-all mode.
        """
        if not self._passes_metadata(entry, skip_name_mask):
            return NO_MATCH

        result = MATCH
        if self.searcher is not None:
            result = self._search(self.searcher, entry, loader)
            if not result.matched:
                return NO_MATCH

        if not self._passes_executable(entry):
            return NO_MATCH
        return result

    def prefilter(self, entry: Entry, *, skip_name_mask: bool = False) -> bool:
        """Evaluate every condition except the content search."""
        return self._passes_metadata(entry, skip_name_mask) and self._passes_executable(entry)

    def match_loaded(self, entry: Entry, data: bytes | None) -> SearchResult:
        """Run the content check on bytes that were already loaded.

        Args:
            entry: Archive entry the bytes belong to.
            data: Entry contents, or None if they could not be loaded.

        Returns:
            SearchResult; MATCH when no content query is set.
        """
        if self.searcher is None:
            return MATCH
        if entry.is_directory or data is None:
            return NO_MATCH
        return self.searcher.search_entry_bytes(entry.name, data)

    def name_matches(self, name: str) -> bool:
        """Check a name against the query's glob; False without a glob.

        When case-insensitive, the name is upper-cased to meet the
        upper-cased mask.
        """
        mask = self.query.glob_mask
        if mask is None:
            return False
        return fnmatchcase(name if self.query.case_sensitive else name.upper(), mask)

    def _passes_metadata(self, entry: Entry, skip_name_mask: bool) -> bool:
        query = self.query
        if entry.is_directory and not query.list_directories:
            return False
        if not entry.is_directory and not query.list_files:
            return False

        extension = entry.extension
        if query.exclude_exts and extension in query.exclude_exts:
            return False
        if query.include_exts and extension not in query.include_exts:
            return False

        if not query.list_hidden and entry.is_hidden:
            return False

        timestamp = entry.timestamp(query.date_field.value)
        if query.min_date is not None and (timestamp is None or timestamp < query.min_date):
            return False
        if query.max_date is not None and timestamp is not None and timestamp > query.max_date:
            return False

        if query.min_size is not None and entry.size < query.min_size:
            return False
        if query.max_size is not None and entry.size > query.max_size:
            return False

        if query.name_mask is not None and not (entry.in_archive and skip_name_mask):
            if not self.name_matches(entry.name):
                return False

        return True

    def _search(self, searcher: ContentSearcher, entry: Entry, loader: EntryLoader | None) -> SearchResult:
        if entry.is_directory:
            return NO_MATCH

        # An archive selected by name stays in its directory listing;
        # its entries are searched when the archive is descended.
        if (
            self.query.descend_archives
            and not entry.in_archive
            and detect_format(entry.name) != ArchiveFormat.NOT_AN_ARCHIVE
            and self.name_matches(entry.name)
        ):
            return MATCH

        if not entry.in_archive:
            return searcher.search_file(entry.full_path)

        if entry.size > self.settings.max_entry_size:
            logger.debug("Skipping %s in %s: archive entry too large", entry.name, entry.path)
            return NO_MATCH
        if loader is None:
            return NO_MATCH
        try:
            data = loader(entry)
        except ListingError as e:
            logger.info("Could not read %s in %s: %s", entry.name, entry.path, e)
            return NO_MATCH
        return searcher.search_entry_bytes(entry.name, data)

    def _passes_executable(self, entry: Entry) -> bool:
        if not self.query.only_executables:
            return True
        if self._windows:
            return entry.extension in WINDOWS_EXECUTABLE_EXTENSIONS
        if entry.in_archive:
            return bool(entry.mode & _EXECUTE_BITS)
        try:
            mode = os.stat(entry.full_path).st_mode
        except OSError:
            return False
        return bool(mode & _EXECUTE_BITS)
