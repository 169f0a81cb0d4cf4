"""Utility modules for dirx.

This module exports commonly used utility functions.
"""

from dirx.utils.formatting import console, err_console, print_error, print_info
from dirx.utils.shell import CommandResult, resolve_command, run_command

__all__ = [
    "CommandResult",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "resolve_command",
    "run_command",
]
