"""Config commands.

Shows the effective settings and where they are read from.
"""

from pathlib import Path
from typing import Annotated

import typer

from dirx.core.paths import get_settings_path, get_user_theme_path
from dirx.core.settings import SettingsError, load_settings
from dirx.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Show dirx settings.",
    no_args_is_help=True,
)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Settings file to read instead of the default.",
        ),
    ] = None,
) -> None:
    """Print the effective settings as JSON."""
    try:
        settings = load_settings(config_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    console.print_json(settings.model_dump_json())


@app.command()
def path() -> None:
    """Print the settings and theme file locations."""
    settings_path = get_settings_path()
    theme_path = get_user_theme_path()
    console.print(f"Settings: {settings_path}", markup=False, soft_wrap=True)
    console.print(f"Theme:    {theme_path}", markup=False, soft_wrap=True)
    if not settings_path.exists():
        print_info("No settings file found; defaults are in use.")
