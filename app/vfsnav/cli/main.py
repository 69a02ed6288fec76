"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from vfsnav import __version__
from vfsnav.cli.commands import config, extract, listing, sizes, transfer
from vfsnav.core.log import configure_logging


app = typer.Typer(
    name="vfsnav",
    help="Browse directories and archives, transfer files, measure folders.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"vfsnav version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """vfsnav - Browse real directories and archive contents alike.

    Paths may reach into archives, e.g. ``backup.zip/docs``.
    """
    configure_logging(verbose)


app.command(name="ls")(listing.ls)
app.command(name="copy")(transfer.copy)
app.command(name="move")(transfer.move)
app.command(name="du")(sizes.du)
app.command(name="extract")(extract.extract)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
