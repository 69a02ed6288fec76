"""Disk usage command implementation.

Computes recursive sizes using the size scheduler and its persisted
cache.
"""

import asyncio
import os
from typing import Annotated

import typer
from rich.table import Table

from vfsnav.cli.support import measure_directories, require_config
from vfsnav.core.config import EngineConfig
from vfsnav.utils.formatting import console, format_size, print_error, print_warning
from vfsnav.vfs.lister import DirectoryLister
from vfsnav.vfs.models import DirectoryEntry


async def _measure(
    paths: list[str], config: EngineConfig
) -> tuple[list[tuple[str, int | None]], list[str]]:
    lister = DirectoryLister.from_config(config)
    entries: list[DirectoryEntry] = []
    missing: list[str] = []

    for path in paths:
        try:
            entries.append(await lister.stat_entry(os.path.abspath(path)))
        except OSError:
            missing.append(path)

    directories = [entry for entry in entries if entry.is_directory]
    sizes = await measure_directories(directories, config, lister)

    rows = [
        (entry.path, sizes.get(entry.path) if entry.is_directory else entry.size)
        for entry in entries
    ]
    return rows, missing


def du(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Files or directories to measure."),
    ] = None,
) -> None:
    """Show the recursive size of files and directories."""
    config = require_config()
    rows, missing = asyncio.run(_measure(paths or ["."], config))

    for path in missing:
        print_error(f"Path not found: {path}")

    if rows:
        table = Table(show_header=True, header_style="bold_header", border_style="border")
        table.add_column("Size", style="info", justify="right")
        table.add_column("Path")
        for path, size in rows:
            table.add_row(format_size(size), path)
        console.print(table)

    for path, size in rows:
        if size is None:
            print_warning(f"Could not measure {path}")

    if missing:
        raise typer.Exit(code=1)
