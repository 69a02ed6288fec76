"""List command implementation.

Lists real directories and archive interiors.
"""

import asyncio
import json
from enum import Enum
from typing import Annotated

import typer

from vfsnav.cli.support import measure_directories, require_config
from vfsnav.core.config import EngineConfig
from vfsnav.utils.formatting import (
    console,
    create_listing_table,
    format_entry_row,
    format_size,
    print_error,
)
from vfsnav.vfs.errors import VfsError
from vfsnav.vfs.lister import DirectoryLister
from vfsnav.vfs.models import Listing


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


async def _collect(
    path: str, config: EngineConfig, with_sizes: bool
) -> tuple[Listing, dict[str, int | None]]:
    lister = DirectoryLister.from_config(config)
    listing = await lister.list(path)
    if not with_sizes or listing.is_archive:
        return listing, {}
    directories = [entry for entry in listing.entries if entry.is_directory]
    return listing, await measure_directories(directories, config, lister)


def ls(
    path: Annotated[
        str,
        typer.Argument(help="Directory, archive, or path inside an archive."),
    ] = ".",
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    sizes: Annotated[
        bool | None,
        typer.Option(
            "--sizes/--no-sizes",
            help="Compute folder sizes (default from config).",
        ),
    ] = None,
) -> None:
    """List a directory or the inside of an archive."""
    config = require_config()
    with_sizes = config.calculate_folder_sizes if sizes is None else sizes

    try:
        listing, folder_sizes = asyncio.run(_collect(path, config, with_sizes))
    except VfsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        _print_json(listing, folder_sizes)
        return

    _print_table(listing, folder_sizes)


# === Private helper functions ===


def _print_table(listing: Listing, folder_sizes: dict[str, int | None]) -> None:
    title = f"{listing.path} [muted](archive)[/]" if listing.is_archive else listing.path
    table = create_listing_table(title)
    for entry in listing.entries:
        table.add_row(*format_entry_row(entry, folder_sizes.get(entry.path)))
    console.print(table)

    total = sum(entry.size for entry in listing.entries if not entry.is_directory)
    console.print(f"\n[dim]{len(listing.entries)} entries, {format_size(total)} in files[/dim]")


def _print_json(listing: Listing, folder_sizes: dict[str, int | None]) -> None:
    data = {
        "path": listing.path,
        "is_archive": listing.is_archive,
        "entries": [
            {
                "name": e.name,
                "path": e.path,
                "kind": e.kind.value,
                "size": folder_sizes.get(e.path) if e.is_directory else e.size,
                "modified_at": e.modified_at.isoformat() if e.modified_at else None,
                "created_at": e.created_at.isoformat() if e.created_at else None,
                "symlink_target": e.symlink_target,
                "extension": e.extension,
            }
            for e in listing.entries
        ],
    }
    console.print_json(json.dumps(data))
