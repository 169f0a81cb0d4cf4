"""Typer application for the dirx command.

``dirx list`` does the listing and searching; ``dirx config`` shows
the settings in effect.
"""

from typing import Annotated

import typer

from dirx import __version__
from dirx.cli.commands import config, listing

app = typer.Typer(
    name="dirx",
    help="Enhanced directory listing with content search inside files and archives.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dirx version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."),
    ] = None,
) -> None:
    """List files by name, size, date, and extension, and search their
    contents, including inside zip, tgz, and 7z archives, Office
    documents, and PDFs.
    """


app.command("list")(listing.list_entries)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
