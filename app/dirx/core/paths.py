"""Locations of the dirx settings and theme files.

Both files live in one configuration directory, chosen in this order:

1. ``$DIRX_CONFIG_DIR`` (used as is)
2. ``$XDG_CONFIG_HOME/dirx``
3. ``~/.config/dirx``
"""

import os
from pathlib import Path

APP_NAME = "dirx"
CONFIG_DIR_ENV = "DIRX_CONFIG_DIR"
SETTINGS_FILE = "config.toml"
THEME_FILE = "theme.toml"


def get_config_dir() -> Path:
    """Directory holding config.toml and theme.toml.

    Empty environment variables are treated as unset.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()

    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".config"
    return base / APP_NAME


def get_settings_path() -> Path:
    """Path of the settings file read by every command."""
    return get_config_dir() / SETTINGS_FILE


def get_user_theme_path() -> Path:
    """Path of the optional user color overrides."""
    return get_config_dir() / THEME_FILE
