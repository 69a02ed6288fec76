"""Extract command implementation."""

import asyncio
import os
from typing import Annotated

import typer

from vfsnav.cli.support import require_config
from vfsnav.transfer.extract import extract_archive
from vfsnav.utils.formatting import print_error, print_success


def extract(
    archive: Annotated[
        str,
        typer.Argument(help="Archive file to extract."),
    ],
    destination: Annotated[
        str | None,
        typer.Argument(help="Directory to extract into (default: next to the archive)."),
    ] = None,
) -> None:
    """Extract an archive into a new directory."""
    if not os.path.isfile(archive):
        print_error(f"Archive not found: {archive}")
        raise typer.Exit(code=1)

    config = require_config()
    archive_path = os.path.abspath(archive)
    target = os.path.abspath(destination) if destination else os.path.dirname(archive_path)

    result = asyncio.run(extract_archive(archive_path, target, tool=config.archive_tool))
    if not result.success:
        print_error(f"Extraction failed: {result.error}")
        raise typer.Exit(code=1)

    print_success(f"Extracted to {result.output_dir}")
