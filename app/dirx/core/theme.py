"""Colors for listing output.

Every file kind gets a ``kind.<name>`` Rich style so that entry lines
can be styled straight from ``Entry.kind``. Colors come from the
bundled ``data/theme.toml``; a ``theme.toml`` in the config directory
may override any subset of them.
"""

import logging
import tomllib
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from rich.theme import Theme

from dirx.core.paths import get_user_theme_path
from dirx.listing.kinds import FileKind

logger = logging.getLogger(__name__)

# Kinds printed in bold
BOLD_KINDS = frozenset({FileKind.DIRECTORY, FileKind.EXECUTABLE, FileKind.ARCHIVE})


def _check_hex(name: str, value: str) -> str:
    color = value.strip()
    if not color.startswith("#"):
        msg = f"{name}: color must start with '#'"
        raise ValueError(msg)
    digits = color[1:]
    if len(digits) not in (3, 6):
        msg = f"{name}: color must be #RGB or #RRGGBB format"
        raise ValueError(msg)
    if any(c not in "0123456789abcdefABCDEF" for c in digits):
        msg = f"{name}: invalid hex color '{color}'"
        raise ValueError(msg)
    return color


class ThemeColors(BaseModel):
    """Hex colors for messages, frames, and each file kind."""

    model_config = ConfigDict(extra="forbid")

    # Frames and messages
    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Entry lines; one per FileKind plus links
    directory: str = "#0ec1c8"
    executable: str = "#f53263"
    symlink: str = "#d44ebc"
    archive: str = "#e8464a"
    image: str = "#d44ebc"
    video: str = "#6f7df5"
    audio: str = "#0e8ac8"
    document: str = "#03b971"
    data: str = "#69B9A1"
    config: str = "#f0f0f0"
    code: str = "#6f9ef5"
    hidden: str = "#7f8c8d"
    default: str = "#dfe6e9"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: ValidationInfo) -> str:
        """Accept only #RGB and #RRGGBB strings."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        return _check_hex(info.field_name or "color", v)

    def kind_color(self, kind: FileKind) -> str:
        """Color configured for a file kind."""
        return str(getattr(self, kind.value))


def get_bundled_theme_path() -> Traversable:
    """Location of the theme shipped with the package."""
    return resources.files("dirx.data").joinpath("theme.toml")


def _load_toml_colors(path: Path | Traversable) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are dropped; the model validates the rest.

    Returns:
        Color names to values, or None if the file is missing or unreadable.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse theme file %s: %s", path, e)
        return None
    except OSError as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return None

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Invalid 'colors' section in %s", path)
        return None
    return {key: value for key, value in table.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Merge the user overrides over the bundled colors.

    An invalid merged theme falls back to the built-in defaults.
    """
    colors = _load_toml_colors(get_bundled_theme_path())
    if colors is None:
        logger.error("Bundled theme is missing; the installation may be damaged")
        colors = {}

    user_path = get_user_theme_path()
    overrides = _load_toml_colors(user_path)
    if overrides:
        logger.debug("Applying theme overrides from %s", user_path)
        colors = {**colors, **overrides}

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme used by every console.

    Args:
        colors: Colors to use; loaded from the theme files when None.
    """
    if colors is None:
        colors = load_theme()

    styles: dict[str, str] = {
        "text": colors.text,
        "muted": colors.muted,
        "dim": colors.muted,
        "excerpt": colors.muted,
        "header": colors.header,
        "bold_header": f"bold {colors.header}",
        "border": colors.border,
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "kind.symlink": colors.symlink,
    }
    for kind in FileKind:
        color = colors.kind_color(kind)
        styles[f"kind.{kind.value}"] = f"bold {color}" if kind in BOLD_KINDS else color

    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Rich theme, built on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme


def reload_theme() -> Theme:
    """Rebuild the cached theme from the theme files."""
    global _cached_theme
    _cached_theme = get_rich_theme()
    return _cached_theme
