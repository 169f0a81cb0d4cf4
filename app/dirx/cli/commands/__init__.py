"""CLI commands for dirx.

This package contains all subcommand implementations.
"""

from dirx.cli.commands import config, listing

__all__ = ["config", "listing"]
