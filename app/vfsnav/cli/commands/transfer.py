"""Copy and move command implementations.

Both commands drop a set of sources into a target directory and show
byte progress while the transfer engine runs.
"""

import asyncio
import os
from typing import Annotated

import typer
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TransferSpeedColumn,
)

from vfsnav.cli.support import require_config
from vfsnav.transfer.engine import TransferEngine
from vfsnav.transfer.guard import plan_drop
from vfsnav.transfer.models import TransferMode, TransferProgress, TransferResult
from vfsnav.utils.formatting import console, print_error, print_info, print_success
from vfsnav.vfs.lister import DirectoryLister

_LABELS = {
    TransferMode.COPY: ("Copying", "Copied"),
    TransferMode.MOVE: ("Moving", "Moved"),
}

SourcesArgument = Annotated[
    list[str],
    typer.Argument(help="Files or directories to transfer."),
]
TargetArgument = Annotated[
    str,
    typer.Argument(help="Directory receiving the sources."),
]


def copy(sources: SourcesArgument, target_dir: TargetArgument) -> None:
    """Copy files and directories into a directory."""
    _run_transfer(sources, target_dir, TransferMode.COPY)


def move(sources: SourcesArgument, target_dir: TargetArgument) -> None:
    """Move files and directories into a directory."""
    _run_transfer(sources, target_dir, TransferMode.MOVE)


# === Private helper functions ===


def _run_transfer(sources: list[str], target_dir: str, mode: TransferMode) -> None:
    if not os.path.isdir(target_dir):
        print_error(f"Not a directory: {target_dir}")
        raise typer.Exit(code=1)

    items = plan_drop(sources, target_dir)
    if not items:
        print_info("Nothing to transfer.")
        return

    config = require_config()
    engine = TransferEngine(DirectoryLister.from_config(config))
    active, done = _LABELS[mode]

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"{active} {len(items)} item(s)", total=None)

        def on_progress(snapshot: TransferProgress) -> None:
            progress.update(task, total=snapshot.total_bytes, completed=snapshot.processed_bytes)

        result = asyncio.run(engine.transfer(items, mode, on_progress))

    _report(result, done)


def _report(result: TransferResult, done: str) -> None:
    if not result.success:
        print_error(f"Transfer aborted: {result.error}")
        raise typer.Exit(code=1)

    for failure in result.failures:
        print_error(f"{failure.source}: {failure.error}")

    succeeded = len(result.items) - len(result.failures)
    if succeeded:
        print_success(f"{done} {succeeded} item(s).")
    if result.failures:
        raise typer.Exit(code=1)
