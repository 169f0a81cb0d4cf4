"""Console output for listings.

Renders each scope reported by the traversal driver: a "Directory of"
header, optional column headers, one line per entry built from the
column definition string, and a footer with the scope's counts.
Entry lines are colored by file kind through the theme.
"""

import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.text import Text

from dirx.core.settings import DEFAULT_COLUMNS, SizeFormat
from dirx.listing.models import Entry, ListingSet, RunTotals
from dirx.utils.formatting import console

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TIMESTAMP_WIDTH = len("2006-01-02 15:04:05")
MODE_WIDTH = 10

# Column definition letters; anything else is printed literally
COLUMN_MODIFIED = "m"
COLUMN_CREATED = "c"
COLUMN_ACCESSED = "a"
COLUMN_SIZE = "s"
COLUMN_MODE = "p"
COLUMN_NAME = "n"
COLUMN_LINK = "l"
COLUMN_PATH = "f"

_SIZE_WIDTHS: dict[SizeFormat, int] = {
    SizeFormat.NATURAL: 14,
    SizeFormat.SEPARATOR: 17,
    SizeFormat.QUANTA: 7,
}


@dataclass(frozen=True, slots=True)
class DisplayOptions:
    """How listings are rendered.

    Attributes:
        columns: Column definition string.
        size_format: How sizes are rendered.
        bare: Print names only, without headers or footers.
        bare_path: In bare mode, join the container path to each name.
        column_headers: Print column headers under each scope header.
        color: Color entries by file kind.
        show_text: Print matched excerpts under their entry.
        list_files: Files are listed (controls the blank line after the header).
    """

    columns: str = DEFAULT_COLUMNS
    size_format: SizeFormat = SizeFormat.NATURAL
    bare: bool = False
    bare_path: bool = False
    column_headers: bool = False
    color: bool = True
    show_text: bool = False
    list_files: bool = True


def format_size(size: int, size_format: SizeFormat = SizeFormat.NATURAL) -> str:
    """Format a byte count, right-aligned to the format's width.

    Args:
        size: Size in bytes.
        size_format: NATURAL (plain bytes), SEPARATOR (thousands
            separators), or QUANTA (K/M/G with two decimals).

    Returns:
        Formatted, padded size string.
    """
    if size_format == SizeFormat.QUANTA:
        if size > 1024**3:
            return f"{size / 1024**3:6.2f}G"
        if size > 1024**2:
            return f"{size / 1024**2:6.2f}M"
        if size > 1024:
            return f"{size / 1024:6.2f}K"
        return f"{size:7d}"
    if size_format == SizeFormat.SEPARATOR:
        return f"{size:17,d}"
    return f"{size:14d}"


def format_mode(entry: Entry) -> str:
    """Render permission bits as ``drwxr-xr-x``.

    The first character is ``d`` for directories, ``l`` for symbolic
    links, ``-`` otherwise. The sticky bit shows as ``t``/``T`` in the
    last position.
    """
    if entry.is_directory:
        kind = "d"
    elif entry.is_symlink:
        kind = "l"
    else:
        kind = "-"

    mode = entry.mode
    triples: list[str] = []
    for shift in (6, 3, 0):
        bits = mode >> shift
        execute = "x" if bits & 1 else "-"
        if shift == 0 and mode & stat.S_ISVTX:
            execute = "t" if bits & 1 else "T"
        triples.append(("r" if bits & 4 else "-") + ("w" if bits & 2 else "-") + execute)
    return kind + "".join(triples)


def format_timestamp(value: datetime | None) -> str:
    """Render a timestamp, or an empty string when it is unavailable."""
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else ""


def _display_name(entry: Entry, with_path: bool) -> str:
    return str(Path(entry.path) / entry.name) if with_path else entry.name


def format_entry(entry: Entry, options: DisplayOptions) -> str:
    """Build the output line for one entry from the column definition.

    Args:
        entry: Entry to render.
        options: Display options.

    Returns:
        The rendered line, without excerpts.
    """
    if options.bare:
        return _display_name(entry, options.bare_path)

    parts: list[str] = []
    for column in options.columns:
        if column == COLUMN_MODIFIED:
            parts.append(format_timestamp(entry.modified))
        elif column == COLUMN_CREATED:
            parts.append(format_timestamp(entry.created))
        elif column == COLUMN_ACCESSED:
            parts.append(format_timestamp(entry.accessed))
        elif column == COLUMN_SIZE:
            parts.append(format_size(entry.size, options.size_format))
        elif column == COLUMN_MODE:
            parts.append(format_mode(entry))
        elif column == COLUMN_NAME:
            parts.append(entry.name)
        elif column == COLUMN_LINK:
            parts.append(f"-> {entry.link_target}" if entry.link_target else "")
        elif column == COLUMN_PATH:
            parts.append(str(entry.path))
        else:
            parts.append(column)
    return "".join(parts)


def entry_style(entry: Entry) -> str:
    """Theme style for an entry line; links override the file kind."""
    if entry.is_symlink:
        return "kind.symlink"
    return f"kind.{entry.kind.value}"


def format_column_headers(options: DisplayOptions) -> str:
    """Build the column header line matching ``format_entry``."""
    parts: list[str] = []
    for column in options.columns:
        if column == COLUMN_MODIFIED:
            parts.append(f"{'Modified':<{TIMESTAMP_WIDTH}}")
        elif column == COLUMN_CREATED:
            parts.append(f"{'Created':<{TIMESTAMP_WIDTH}}")
        elif column == COLUMN_ACCESSED:
            parts.append(f"{'Accessed':<{TIMESTAMP_WIDTH}}")
        elif column == COLUMN_SIZE:
            parts.append(f"{'Size':>{_SIZE_WIDTHS[options.size_format]}}")
        elif column == COLUMN_MODE:
            parts.append(f"{'Perms':>{MODE_WIDTH}}")
        elif column == COLUMN_NAME:
            parts.append("Name")
        elif column == COLUMN_LINK:
            parts.append("Link")
        elif column == COLUMN_PATH:
            parts.append("Path")
        else:
            parts.append(column)
    return "".join(parts)


class ConsoleReporter:
    """Prints listings to a Rich console.

    Empty scopes reached by recursion print nothing at all, so a deep
    recursive search shows only the directories that matched.
    """

    def __init__(self, options: DisplayOptions, out: Console | None = None) -> None:
        self.options = options
        self.out = out or console

    def report(self, scope: Path, listing: ListingSet, recursed: bool) -> None:
        """Print one scope: header, entries, and footer."""
        options = self.options
        show_frame = not options.bare and (not recursed or bool(listing.matched))

        if show_frame:
            self._line("")
            self._line(f"   Directory of {scope}", style="bold_header")
            if options.list_files:
                self._line("")
                if options.column_headers:
                    self._line(format_column_headers(options), style="header")

        for entry in listing.matched:
            self._line(format_entry(entry, options), style=entry_style(entry))
            if options.show_text and entry.matched_excerpt:
                self._line(entry.matched_excerpt.rstrip("\n"), style="excerpt")

        if show_frame:
            size = format_size(listing.bytes_found, options.size_format).strip()
            self._line(
                f"   {listing.file_count:4d} Files ({size} bytes) and "
                f"{listing.directory_count:4d} Directories."
            )

    def report_totals(self, totals: RunTotals) -> None:
        """Print the totals footer of a recursive run."""
        if self.options.bare:
            return
        size = format_size(totals.bytes, self.options.size_format).strip()
        self._line("")
        self._line(f"   {totals.files:4d} Total Files ({size} Total Bytes) listed.")

    def _line(self, text: str, style: str | None = None) -> None:
        # Text objects keep names with [brackets] from being read as markup
        if not self.options.color:
            style = None
        self.out.print(Text(text, style=style or ""), soft_wrap=True)
