"""Tuning settings and listing defaults loaded from config.toml.

Settings are stored in ~/.config/dirx/config.toml with two optional
sections::

    [search]
    chunk_size = 20000
    overlap_size = 400
    max_entry_size = 1000000

    [listing]
    sort = "type"
    size_format = "quanta"

A missing file yields the defaults. Command-line flags override
whatever the file sets.
"""

import logging
import tomllib
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from dirx.core.paths import get_settings_path

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = "p   m  (c)  s   nl"


class SizeFormat(str, Enum):
    """How file sizes are rendered."""

    NATURAL = "natural"
    SEPARATOR = "separator"
    QUANTA = "quanta"


class SearchSettings(BaseModel):
    """Constants that tune content search cost.

    Attributes:
        chunk_size: Bytes read per block when scanning a disk file.
        overlap_size: Bytes carried into the next block so that matches
            spanning a block boundary are still found.
        max_entry_size: Largest archive entry loaded into memory for
            content search. Larger entries never match a content query.
        excerpt_before: Characters of context kept before a match.
        excerpt_after: Characters of context kept after a match.
        pdf_utility: Command name of the PDF text-extraction utility.
        sevenzip_batch_bytes: Upper bound on entry bytes decoded per
            7-Zip extraction pass.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    chunk_size: Annotated[int, Field(ge=1024)] = 20000
    overlap_size: Annotated[int, Field(ge=0)] = 400
    max_entry_size: Annotated[int, Field(ge=0)] = 1_000_000
    excerpt_before: Annotated[int, Field(ge=0)] = 5
    excerpt_after: Annotated[int, Field(ge=0)] = 60
    pdf_utility: str = "pdftotext"
    sevenzip_batch_bytes: Annotated[int, Field(ge=1)] = 64 * 1024 * 1024

    @model_validator(mode="after")
    def _check_overlap(self) -> "SearchSettings":
        if self.overlap_size >= self.chunk_size:
            msg = f"overlap_size ({self.overlap_size}) must be smaller than chunk_size ({self.chunk_size})"
            raise ValueError(msg)
        return self


class ListingDefaults(BaseModel):
    """Default presentation options for the list command.

    Attributes:
        sort: Sort field name (see SortField).
        ascending: Sort direction.
        directories_first: Group directories before files.
        size_format: How sizes are rendered.
        columns: Column definition string.
        color: Whether to color entries by kind.
    """

    model_config = ConfigDict(extra="forbid")

    sort: Literal["name", "date", "created", "accessed", "ext", "type", "size", "none"] = "name"
    ascending: bool = True
    directories_first: bool = True
    size_format: SizeFormat = SizeFormat.NATURAL
    columns: str = DEFAULT_COLUMNS
    color: bool = True


class Settings(BaseModel):
    """Complete contents of config.toml."""

    model_config = ConfigDict(extra="forbid")

    search: SearchSettings = SearchSettings()
    listing: ListingDefaults = ListingDefaults()


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsNotFoundError(SettingsError):
    """Raised when an explicitly requested settings file does not exist."""


class SettingsParseError(SettingsError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Explicit settings file. If None, uses the default settings
            path and falls back to defaults when it does not exist.

    Returns:
        Validated Settings object.

    Raises:
        SettingsNotFoundError: If an explicit path does not exist.
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the content doesn't match the schema.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        if path is not None:
            raise SettingsNotFoundError(f"Settings file not found: {settings_path}")
        logger.debug("No settings file at %s, using defaults", settings_path)
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings content: {e}") from e
