"""Query configuration for one listing run.

The QueryConfig is built once per invocation, before traversal starts,
and is passed by reference into every component. It is frozen: no
component can change the query mid-traversal.
"""

import re
from datetime import datetime, timedelta
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from dirx.core.settings import SearchSettings

DATE_FORMAT = "%Y-%m-%d"


class DateField(str, Enum):
    """Timestamp that date bounds apply to."""

    MODIFIED = "modified"
    CREATED = "created"
    ACCESSED = "accessed"


class SearchMode(str, Enum):
    """Content search mode.

    Attributes:
        NONE: No content search.
        CASE: Literal text, case-sensitive.
        NOCASE: Literal text, case-insensitive.
        REGEX: Regular expression, compiled verbatim.
    """

    NONE = "none"
    CASE = "case"
    NOCASE = "nocase"
    REGEX = "regex"


class SortField(str, Enum):
    """Field the matched entries are ordered by."""

    NAME = "name"
    DATE = "date"
    CREATED = "created"
    ACCESSED = "accessed"
    EXT = "ext"
    TYPE = "type"
    SIZE = "size"
    NONE = "none"


def _normalize_exts(values: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(v.strip().lstrip(".").upper() for v in values if v.strip())


def compile_search_pattern(mode: SearchMode, text: str) -> re.Pattern[str]:
    """Compile the content search pattern for a mode.

    Args:
        mode: Search mode (must not be NONE).
        text: Query text or regular expression.

    Returns:
        Compiled pattern.

    Raises:
        ValueError: If the regular expression is malformed.
    """
    if mode == SearchMode.REGEX:
        source = text
    else:
        source = re.escape(text)
    flags = re.IGNORECASE if mode == SearchMode.NOCASE else 0
    try:
        return re.compile(source, flags)
    except re.error as e:
        msg = f"Invalid regular expression {text!r}: {e}"
        raise ValueError(msg) from e


class QueryConfig(BaseModel):
    """Compound predicate state for one listing run.

    Attributes:
        name_mask: Glob applied to entry names (None matches everything).
        case_sensitive: Whether the glob and name sorting are case-sensitive.
        list_files: Include files.
        list_directories: Include directories (and recurse into them).
        list_hidden: Include names starting with a dot.
        only_executables: Restrict to executable files.
        include_exts: If non-empty, only these extensions are listed.
        exclude_exts: Extensions that are never listed.
        exclude_dirs: Directory names whose scopes are skipped entirely.
        min_size: Inclusive lower size bound in bytes.
        max_size: Inclusive upper size bound in bytes.
        min_date: Inclusive lower bound on the active timestamp.
        max_date: Inclusive upper bound on the active timestamp.
        date_field: Which timestamp the date bounds apply to.
        search_mode: Content search mode.
        search_text: Query text for content search.
        find_all: Collect every matching excerpt instead of stopping at the first match.
        descend_archives: List the entries of supported archives.
        archive_password: Password for encrypted 7-Zip archives.
        recurse: Recurse into subdirectories.
        sort_field: Field the matched entries are ordered by.
        ascending: Sort direction.
        directories_first: Group directories before files.
        settings: Search tuning constants.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name_mask: str | None = None
    case_sensitive: bool = False
    list_files: bool = True
    list_directories: bool = True
    list_hidden: bool = True
    only_executables: bool = False
    include_exts: tuple[str, ...] = ()
    exclude_exts: tuple[str, ...] = ()
    exclude_dirs: tuple[str, ...] = ()
    min_size: Annotated[int, Field(ge=0)] | None = None
    max_size: Annotated[int, Field(ge=0)] | None = None
    min_date: datetime | None = None
    max_date: datetime | None = None
    date_field: DateField = DateField.MODIFIED
    search_mode: SearchMode = SearchMode.NONE
    search_text: str | None = None
    find_all: bool = False
    descend_archives: bool = False
    archive_password: str | None = None
    recurse: bool = False
    sort_field: SortField = SortField.NAME
    ascending: bool = True
    directories_first: bool = True
    settings: SearchSettings = SearchSettings()

    _pattern: re.Pattern[str] | None = PrivateAttr(default=None)

    @field_validator("include_exts", "exclude_exts")
    @classmethod
    def _upper_exts(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _normalize_exts(v)

    @field_validator("min_date", "max_date")
    @classmethod
    def _aware_dates(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.astimezone()
        return v

    @model_validator(mode="after")
    def _check_search(self) -> "QueryConfig":
        if self.search_mode != SearchMode.NONE and not self.search_text:
            msg = f"Search mode '{self.search_mode.value}' requires search text"
            raise ValueError(msg)
        if self.search_mode != SearchMode.NONE and self.search_text:
            # Fails fast on a malformed regular expression
            compile_search_pattern(self.search_mode, self.search_text)
        return self

    def model_post_init(self, __context: object) -> None:
        """Compile the content search pattern once."""
        if self.search_mode != SearchMode.NONE and self.search_text:
            self._pattern = compile_search_pattern(self.search_mode, self.search_text)

    @property
    def pattern(self) -> re.Pattern[str] | None:
        """Compiled content search pattern, or None without a content query."""
        return self._pattern

    @property
    def has_content_query(self) -> bool:
        """Check if a content search is configured."""
        return self._pattern is not None

    @property
    def glob_mask(self) -> str | None:
        """Name mask prepared for matching (upper-cased when case-insensitive)."""
        if self.name_mask is None:
            return None
        return self.name_mask if self.case_sensitive else self.name_mask.upper()


def parse_size_range(value: str) -> tuple[int | None, int | None]:
    """Parse a ``MIN:MAX`` size range in bytes.

    Either side may be empty. A value without a colon is a lower bound.

    Args:
        value: Size range string, e.g. ``"1000:"`` or ``":2048"``.

    Returns:
        Tuple of (min_size, max_size), each None when unset.

    Raises:
        ValueError: If a bound is not a non-negative integer.
    """
    low, _, high = value.partition(":")
    bounds: list[int | None] = []
    for part in (low.strip(), high.strip()):
        if not part:
            bounds.append(None)
            continue
        try:
            number = int(part)
        except ValueError:
            msg = f"Invalid size range {value!r}: {part!r} is not a number"
            raise ValueError(msg) from None
        if number < 0:
            msg = f"Invalid size range {value!r}: sizes cannot be negative"
            raise ValueError(msg)
        bounds.append(number)
    return bounds[0], bounds[1]


def parse_date_range(value: str) -> tuple[datetime | None, datetime | None]:
    """Parse a ``YYYY-MM-DD:YYYY-MM-DD`` date range in local time.

    Either side may be empty. The upper bound is inclusive through the
    end of that day.

    Args:
        value: Date range string.

    Returns:
        Tuple of (min_date, max_date) as timezone-aware datetimes.

    Raises:
        ValueError: If a date does not match YYYY-MM-DD.
    """
    low, _, high = value.partition(":")
    try:
        min_date = datetime.strptime(low.strip(), DATE_FORMAT).astimezone() if low.strip() else None
        max_date = None
        if high.strip():
            day = datetime.strptime(high.strip(), DATE_FORMAT)
            max_date = (day + timedelta(days=1) - timedelta(microseconds=1)).astimezone()
    except ValueError as e:
        msg = f"Invalid date range {value!r}: {e}"
        raise ValueError(msg) from e
    return min_date, max_date
