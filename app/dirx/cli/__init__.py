"""CLI package for dirx.

This package contains the Typer application and all subcommands.
"""

from dirx.cli.main import app

__all__ = ["app"]
