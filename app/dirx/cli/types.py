"""Shared types and utilities for CLI commands.

This module provides logging setup and option parsing helpers used
across CLI command modules.
"""

import logging

from rich.logging import RichHandler

from dirx.utils.formatting import err_console

# Third-party loggers kept at WARNING even in debug mode
_NOISY_LOGGERS = ("py7zr",)


def setup_logging(*, errors: bool = False, debug: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        errors: Show diagnostics for unreadable files and archives (INFO).
        debug: Show debug messages (DEBUG); implies errors.
    """
    if debug:
        level = logging.DEBUG
    elif errors:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=debug, markup=False)],
        force=True,
    )
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


def split_values(values: list[str] | None) -> tuple[str, ...]:
    """Flatten repeated and comma-separated option values.

    Args:
        values: Option values, e.g. ``["txt,md", "pdf"]``.

    Returns:
        Tuple of non-empty, stripped values.
    """
    if not values:
        return ()
    return tuple(part.strip() for value in values for part in value.split(",") if part.strip())
