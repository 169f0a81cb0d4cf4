"""Shared Rich consoles and message helpers.

Listings are printed to ``console`` (stdout). Errors and log records
go to ``err_console`` (stderr), so bare listings stay clean when piped.
"""

import sys
from typing import Literal, TextIO

from rich.console import Console
from rich.markup import escape

from dirx.core.theme import get_theme


def _color_system(stream: TextIO) -> Literal["truecolor"] | None:
    """Full hex colors on a terminal, no colors when redirected."""
    return "truecolor" if stream.isatty() else None


def make_console(*, stderr: bool = False) -> Console:
    """Create a themed console for stdout or stderr."""
    stream = sys.stderr if stderr else sys.stdout
    return Console(theme=get_theme(), stderr=stderr, color_system=_color_system(stream), highlight=False)


console = make_console()
err_console = make_console(stderr=True)


def print_info(message: str) -> None:
    """Print an info message; the text is never read as markup."""
    console.print(f"[info]{escape(message)}[/]")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[error]Error:[/] {escape(message)}")
