"""Traversal driver.

Lists one scope at a time (a directory or an archive): enumerate the
children, filter them through the condition evaluator, sort the
matches, hand them to a reporter, then recurse. Archives found in a
directory are descended first, then subdirectories, each in sorted
order. Archives are never opened inside other archives.

Running totals are threaded through the recursion: each call takes
the totals so far and returns them updated.
"""

import logging
from pathlib import Path
from typing import Protocol

from dirx.archives import ArchiveFormat, detect_format, get_adapter
from dirx.core.query import QueryConfig
from dirx.listing.conditions import ConditionEvaluator
from dirx.listing.errors import ArchiveAuthError, ArchiveError
from dirx.listing.filesystem import read_directory
from dirx.listing.models import ListingSet, RunTotals
from dirx.listing.sorting import sort_entries
from dirx.listing.targets import StartTarget

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    """Receives each listed scope and the run totals."""

    def report(self, scope: Path, listing: ListingSet, recursed: bool) -> None:
        """Output one scope's sorted matches and counts."""
        ...

    def report_totals(self, totals: RunTotals) -> None:
        """Output the totals of a recursive run."""
        ...


class TraversalDriver:
    """Walks directories and archives, reporting matches per scope.

    Attributes:
        query: Query for the whole run.
        reporter: Output collaborator.
        evaluator: Condition evaluator built from the query.
    """

    def __init__(
        self,
        query: QueryConfig,
        reporter: Reporter,
        evaluator: ConditionEvaluator | None = None,
    ) -> None:
        self.query = query
        self.reporter = reporter
        self.evaluator = evaluator or ConditionEvaluator(query)

    def run(self, start: StartTarget) -> RunTotals:
        """List the start scope and everything below it.

        Args:
            start: Start directory or archive.

        Returns:
            Totals over every scope listed.
        """
        if start.is_archive:
            totals = self.list_archive(start.path, RunTotals(), recursed=False)
        else:
            totals = self.list_directory(start.path, RunTotals(), recursed=False)

        if self.query.recurse:
            self.reporter.report_totals(totals)
        return totals

    def list_directory(self, directory: Path, totals: RunTotals, *, recursed: bool = True) -> RunTotals:
        """List one directory scope and recurse into its children.

        Args:
            directory: Directory to list.
            totals: Totals accumulated so far.
            recursed: False for the start scope.

        Returns:
            Totals including this scope and its descendants.
        """
        if self._excluded(directory):
            logger.debug("Excluding directory %s", directory)
            return totals

        logger.debug("Analyzing directory %s", directory)
        listing = self.collect_directory(directory)
        listing.matched = sort_entries(listing.matched, self.query)
        totals = totals.add(listing)
        self.reporter.report(directory, listing, recursed)

        for name in sorted(listing.archives):
            skip_name_mask = self.evaluator.name_matches(name)
            totals = self.list_archive(directory / name, totals, skip_name_mask=skip_name_mask)

        if self.query.recurse:
            for name in sorted(listing.subdirs):
                totals = self.list_directory(directory / name, totals)
        return totals

    def list_archive(
        self,
        archive_path: Path,
        totals: RunTotals,
        *,
        recursed: bool = True,
        skip_name_mask: bool = False,
    ) -> RunTotals:
        """List the entries of one archive.

        An archive that cannot be opened is logged and listed as empty;
        it never stops the rest of the run.

        Args:
            archive_path: Archive file to list.
            totals: Totals accumulated so far.
            recursed: False when the run started in this archive.
            skip_name_mask: List entries regardless of the name glob.

        Returns:
            Totals including this archive.
        """
        if self._excluded(archive_path.parent):
            return totals

        logger.debug("Analyzing archive %s", archive_path)
        try:
            listing = self.collect_archive(archive_path, skip_name_mask=skip_name_mask)
        except ArchiveAuthError as e:
            logger.log(self._error_level(recursed), "Invalid password for %s", e.path)
            listing = ListingSet()
        except ArchiveError as e:
            logger.log(self._error_level(recursed), "%s", e)
            listing = ListingSet()

        listing.matched = sort_entries(listing.matched, self.query)
        totals = totals.add(listing)
        self.reporter.report(archive_path, listing, recursed)
        return totals

    def collect_directory(self, directory: Path) -> ListingSet:
        """Enumerate and filter one directory without sorting or recursing.

        Besides the matches, collects the subdirectories eligible for
        recursion and, when archive descent is on, the supported
        archives to descend into.
        """
        query = self.query
        listing = ListingSet()
        for entry in read_directory(directory):
            result = self.evaluator.matches(entry)
            if result.matched:
                listing.add(result.apply(entry))

            # Archives may carry execute bits, so go by name, not kind
            if (
                query.descend_archives
                and not entry.is_directory
                and detect_format(entry.name) != ArchiveFormat.NOT_AN_ARCHIVE
            ):
                listing.archives.append(entry.name)
            if entry.is_directory and query.list_directories and (query.list_hidden or not entry.is_hidden):
                listing.subdirs.append(entry.name)
        return listing

    def collect_archive(self, archive_path: Path, *, skip_name_mask: bool = False) -> ListingSet:
        """Enumerate and filter one archive.

        Raises:
            ArchiveAuthError: If the password is missing or wrong.
            ArchiveOpenError: If the archive cannot be opened.
        """
        adapter = get_adapter(
            detect_format(archive_path),
            password=self.query.archive_password,
            batch_bytes=self.query.settings.sevenzip_batch_bytes,
        )
        return adapter.enumerate_and_filter(archive_path, self.evaluator, skip_name_mask=skip_name_mask)

    def _excluded(self, path: Path) -> bool:
        exclude_dirs = self.query.exclude_dirs
        return bool(exclude_dirs) and any(part in exclude_dirs for part in path.parts)

    @staticmethod
    def _error_level(recursed: bool) -> int:
        # The start archive is reported even without --errors
        return logging.INFO if recursed else logging.WARNING
