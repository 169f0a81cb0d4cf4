"""List command implementation.

Lists directory and archive entries matching name, size, date,
extension, and content conditions.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from dirx.cli.display import ConsoleReporter, DisplayOptions
from dirx.cli.types import setup_logging, split_values
from dirx.core.query import (
    DateField,
    QueryConfig,
    SearchMode,
    SortField,
    parse_date_range,
    parse_size_range,
)
from dirx.core.settings import Settings, SettingsError, SizeFormat, load_settings
from dirx.listing.targets import StartTarget, resolve_target
from dirx.listing.traversal import TraversalDriver
from dirx.utils.formatting import print_error

logger = logging.getLogger(__name__)


def _search_options(text: str | None, itext: str | None, regex: str | None) -> tuple[SearchMode, str | None]:
    """Pick the search mode from the mutually exclusive text options."""
    given = [
        (mode, value)
        for mode, value in (
            (SearchMode.CASE, text),
            (SearchMode.NOCASE, itext),
            (SearchMode.REGEX, regex),
        )
        if value is not None
    ]
    if len(given) > 1:
        msg = "Use only one of --text, --itext, and --regex"
        raise ValueError(msg)
    if not given:
        return SearchMode.NONE, None
    return given[0]


def _load(config_path: Path | None) -> Settings:
    try:
        return load_settings(config_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def list_entries(
    target: Annotated[
        str | None,
        typer.Argument(
            help="Directory, glob, directory/glob, or archive/glob to list.",
            show_default=False,
        ),
    ] = None,
    sort: Annotated[
        SortField | None,
        typer.Option("--sort", "-o", help="Sort by field.", case_sensitive=False),
    ] = None,
    desc: Annotated[bool, typer.Option("--desc", help="Sort descending.")] = False,
    no_dirs_first: Annotated[
        bool,
        typer.Option("--no-dirs-first", help="Sort directories among files."),
    ] = False,
    no_hidden: Annotated[
        bool,
        typer.Option("--no-hidden", help="Skip names starting with a dot."),
    ] = False,
    case_sensitive: Annotated[
        bool,
        typer.Option("--case-sensitive", help="Match and sort names case-sensitively."),
    ] = False,
    bare: Annotated[bool, typer.Option("--bare", help="Print names only.")] = False,
    bare_path: Annotated[
        bool,
        typer.Option("--bare-path", help="Print full paths only."),
    ] = False,
    columns: Annotated[
        str | None,
        typer.Option(
            "--columns",
            "-c",
            help="Column definition: m modified, c created, a accessed, s size, "
            "p permissions, n name, l link, f path; other characters are literal.",
        ),
    ] = None,
    headers: Annotated[bool, typer.Option("--headers", help="Print column headers.")] = False,
    dirs_only: Annotated[bool, typer.Option("--dirs-only", help="List directories only.")] = False,
    no_dirs: Annotated[
        bool,
        typer.Option("--no-dirs", help="Do not list or recurse into directories."),
    ] = False,
    date_range: Annotated[
        str | None,
        typer.Option("--date-range", "-m", help="Date range YYYY-MM-DD:YYYY-MM-DD; either side optional."),
    ] = None,
    date_field: Annotated[
        DateField,
        typer.Option("--date-field", help="Timestamp the date range applies to.", case_sensitive=False),
    ] = DateField.MODIFIED,
    size_range: Annotated[
        str | None,
        typer.Option("--size-range", "-s", help="Size range MIN:MAX in bytes; either side optional."),
    ] = None,
    size_format: Annotated[
        SizeFormat | None,
        typer.Option("--size-format", help="How sizes are printed.", case_sensitive=False),
    ] = None,
    recurse: Annotated[bool, typer.Option("--recurse", "-r", help="Recurse into subdirectories.")] = False,
    text: Annotated[
        str | None,
        typer.Option("--text", "-t", help="Only files containing this text (case-sensitive)."),
    ] = None,
    itext: Annotated[
        str | None,
        typer.Option("--itext", "-i", help="Only files containing this text (case-insensitive)."),
    ] = None,
    regex: Annotated[
        str | None,
        typer.Option("--regex", "-e", help="Only files matching this regular expression."),
    ] = None,
    show_text: Annotated[
        bool,
        typer.Option("--show-text", "-T", help="Print every match found under its file."),
    ] = False,
    include: Annotated[
        list[str] | None,
        typer.Option("--include", help="Only these extensions (comma-separated or repeated)."),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Skip these extensions (comma-separated or repeated)."),
    ] = None,
    exclude_dir: Annotated[
        list[str] | None,
        typer.Option("--exclude-dir", help="Skip directories with these names."),
    ] = None,
    archives: Annotated[
        bool,
        typer.Option("--archives", "-z", help="List the contents of zip, tgz, and 7z archives."),
    ] = False,
    password: Annotated[
        str | None,
        typer.Option("--password", help="Password for encrypted 7z archives."),
    ] = None,
    executables: Annotated[
        bool,
        typer.Option("--executables", help="Only executable files."),
    ] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Do not color entries.")] = False,
    errors: Annotated[
        bool,
        typer.Option("--errors", help="Report unreadable files, archives, and invalid passwords."),
    ] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Print debug messages.")] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Settings file to read instead of the default."),
    ] = None,
) -> None:
    """List files and directories matching the given conditions.

    Examples:
        dirx list                              # Current directory
        dirx list "src/*.py" -r                # Python files, recursively
        dirx list -o size --desc               # Largest first
        dirx list -r -i "quarterly" -T         # Files containing text, with excerpts
        dirx list -z "*.zip" -t TODO           # Search inside zip archives
        dirx list backup.7z/ --password secret # Entries of an encrypted archive
    """
    setup_logging(errors=errors, debug=debug)
    settings = _load(config_path)
    defaults = settings.listing

    start: StartTarget = resolve_target(target)
    if not start.path.exists():
        print_error(f"Directory not found: {start.path}")
        raise typer.Exit(code=1)

    try:
        search_mode, search_text = _search_options(text, itext, regex)
        min_date, max_date = parse_date_range(date_range) if date_range else (None, None)
        min_size, max_size = parse_size_range(size_range) if size_range else (None, None)
        query = QueryConfig(
            name_mask=start.mask,
            case_sensitive=case_sensitive,
            list_files=not dirs_only,
            list_directories=not no_dirs,
            list_hidden=not no_hidden,
            only_executables=executables,
            include_exts=split_values(include),
            exclude_exts=split_values(exclude),
            exclude_dirs=split_values(exclude_dir),
            min_size=min_size,
            max_size=max_size,
            min_date=min_date,
            max_date=max_date,
            date_field=date_field,
            search_mode=search_mode,
            search_text=search_text,
            find_all=show_text,
            descend_archives=archives or start.is_archive,
            archive_password=password,
            recurse=recurse,
            sort_field=sort or SortField(defaults.sort),
            ascending=False if desc else defaults.ascending,
            directories_first=False if no_dirs_first else defaults.directories_first,
            settings=settings.search,
        )
    except (ValidationError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    options = DisplayOptions(
        columns=columns if columns is not None else defaults.columns,
        size_format=size_format or defaults.size_format,
        bare=bare or bare_path,
        bare_path=bare_path,
        column_headers=headers,
        color=defaults.color and not no_color,
        show_text=show_text,
        list_files=not dirs_only,
    )

    logger.debug("Listing %s with mask %s", start.path, start.mask)
    driver = TraversalDriver(query, ConsoleReporter(options))
    driver.run(start)
