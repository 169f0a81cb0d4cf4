"""Ordering of matched entries."""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from dirx.core.query import QueryConfig, SortField
from dirx.listing.kinds import KIND_SORT_RANK
from dirx.listing.models import Entry


def _time_key(value: datetime | None) -> float:
    # Missing timestamps sort as the oldest
    return value.timestamp() if value is not None else float("-inf")


def _sort_key(field: SortField, case_sensitive: bool) -> Callable[[Entry], Any]:
    """Build the key function for a sort field."""

    def name_key(entry: Entry) -> str:
        return entry.name if case_sensitive else entry.name.upper()

    if field == SortField.DATE:
        return lambda entry: _time_key(entry.modified)
    if field == SortField.CREATED:
        return lambda entry: _time_key(entry.created)
    if field == SortField.ACCESSED:
        return lambda entry: _time_key(entry.accessed)
    if field == SortField.SIZE:
        return lambda entry: entry.size
    if field == SortField.EXT:
        return lambda entry: (entry.extension, name_key(entry))
    if field == SortField.TYPE:
        return lambda entry: (KIND_SORT_RANK[entry.kind], entry.extension, name_key(entry))
    return name_key


def sort_entries(entries: list[Entry], query: QueryConfig) -> list[Entry]:
    """Order entries by the query's sort field and direction.

    Directories are grouped before files unless ``directories_first``
    is disabled; the grouping does not flip with the sort direction.
    ``SortField.NONE`` keeps enumeration order.

    Args:
        entries: Entries to order.
        query: Query carrying sort field, direction, and case sensitivity.

    Returns:
        New, sorted list.
    """
    ordered = list(entries)
    if query.sort_field != SortField.NONE:
        key = _sort_key(query.sort_field, query.case_sensitive)
        ordered.sort(key=key, reverse=not query.ascending)
    if query.directories_first:
        ordered.sort(key=lambda entry: not entry.is_directory)
    return ordered
