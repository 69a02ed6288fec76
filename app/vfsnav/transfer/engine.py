"""Batched copy/move transfers with byte-granular progress.

A batch runs in two phases. The scan phase walks every source to fix
the byte and file totals; the execute phase transfers items in
submission order and reports progress after each completed file, or
once per item when a move completes as an atomic rename.
"""

import asyncio
import errno
import inspect
import logging
import os
import shutil
from collections.abc import Awaitable, Callable
from functools import partial

import aiofiles.os

from vfsnav.transfer.models import (
    TransferItem,
    TransferItemResult,
    TransferMode,
    TransferProgress,
    TransferResult,
)
from vfsnav.vfs.errors import VfsError
from vfsnav.vfs.lister import DirectoryLister
from vfsnav.vfs.models import DirectoryEntry, EntryKind

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TransferProgress], Awaitable[None] | None]


class TransferEngine:
    """Executes copy/move batches on the real filesystem.

    The engine performs no cycle detection: callers filter items with
    ``vfsnav.transfer.guard`` first.

    Args:
        lister: Directory lister used to walk source trees.
    """

    def __init__(self, lister: DirectoryLister | None = None) -> None:
        self._lister = lister or DirectoryLister()

    async def transfer(
        self,
        items: list[TransferItem],
        mode: TransferMode,
        on_progress: ProgressCallback | None = None,
    ) -> TransferResult:
        """Transfer a batch of items.

        Per-item failures are recorded and the remaining items still run.
        The batch only fails as a whole if an error escapes the per-item
        handling (for example, a failing progress callback).

        Args:
            items: Source/destination pairs, executed in order.
            mode: Copy or move.
            on_progress: Called with a progress snapshot after each
                completed file or atomic rename. May be a coroutine function.

        Returns:
            TransferResult with per-item outcomes and final progress.
        """
        progress = TransferProgress()
        results: list[TransferItemResult] = []

        try:
            footprints = await self._scan(items)
            progress = TransferProgress(
                total_bytes=sum(size for size, _ in footprints.values()),
                total_files=sum(files for _, files in footprints.values()),
            )
            logger.debug(
                "Scanned %d item(s): %d bytes in %d file(s)",
                len(items),
                progress.total_bytes,
                progress.total_files,
            )

            for item in items:
                results.append(
                    await self._transfer_item(item, mode, footprints, progress, on_progress)
                )
        except Exception as e:
            logger.error("Transfer batch aborted: %s", e)
            return TransferResult(
                success=False,
                error=str(e),
                items=tuple(results),
                progress=progress.snapshot(),
            )

        return TransferResult(success=True, items=tuple(results), progress=progress.snapshot())

    # === Scan phase ===

    async def _scan(self, items: list[TransferItem]) -> dict[str, tuple[int, int]]:
        """Measure each top-level source as (bytes, files)."""
        footprints: dict[str, tuple[int, int]] = {}
        for item in items:
            if item.source in footprints:
                continue
            try:
                entry = await self._lister.stat_entry(item.source)
            except OSError as e:
                logger.debug("Cannot scan %s: %s", item.source, e)
                footprints[item.source] = (0, 0)
                continue
            footprints[item.source] = await self._measure(entry)
        return footprints

    async def _measure(self, entry: DirectoryEntry) -> tuple[int, int]:
        if entry.kind != EntryKind.DIRECTORY:
            return entry.size, 1

        try:
            listing = await self._lister.list_real(entry.path)
        except VfsError as e:
            logger.debug("Skipping unreadable directory %s: %s", entry.path, e)
            return 0, 0

        total_bytes = 0
        total_files = 0
        for child in listing.entries:
            size, files = await self._measure(child)
            total_bytes += size
            total_files += files
        return total_bytes, total_files

    # === Execute phase ===

    async def _transfer_item(
        self,
        item: TransferItem,
        mode: TransferMode,
        footprints: dict[str, tuple[int, int]],
        progress: TransferProgress,
        on_progress: ProgressCallback | None,
    ) -> TransferItemResult:
        """Transfer one item, converting OS and listing errors into a failed result."""
        try:
            parent = os.path.dirname(item.destination)
            if parent:
                await aiofiles.os.makedirs(parent, exist_ok=True)

            if mode == TransferMode.COPY:
                await self._copy_tree(item.source, item.destination, progress, on_progress)
            else:
                await self._move(item, footprints, progress, on_progress)
        except (OSError, VfsError) as e:
            logger.warning(
                "Failed to %s %s to %s: %s", mode.value, item.source, item.destination, e
            )
            return TransferItemResult(
                source=item.source,
                destination=item.destination,
                success=False,
                error=str(e),
            )

        return TransferItemResult(source=item.source, destination=item.destination, success=True)

    async def _move(
        self,
        item: TransferItem,
        footprints: dict[str, tuple[int, int]],
        progress: TransferProgress,
        on_progress: ProgressCallback | None,
    ) -> None:
        try:
            await aiofiles.os.rename(item.source, item.destination)
        except OSError as e:
            # Typically EXDEV: source and destination on different devices
            logger.debug("Rename of %s failed (%s), copying instead", item.source, e)
            await self._copy_tree(item.source, item.destination, progress, on_progress)
            await self._remove_tree(item.source)
            return

        size, files = footprints.get(item.source, (0, 0))
        progress.advance(size, files)
        await self._emit(progress, on_progress)

    async def _copy_tree(
        self,
        source: str,
        destination: str,
        progress: TransferProgress,
        on_progress: ProgressCallback | None,
    ) -> None:
        entry = await self._lister.stat_entry(source)
        await self._copy_entry(entry, destination, progress, on_progress)

    async def _copy_entry(
        self,
        entry: DirectoryEntry,
        destination: str,
        progress: TransferProgress,
        on_progress: ProgressCallback | None,
    ) -> None:
        if entry.kind == EntryKind.DIRECTORY:
            await aiofiles.os.makedirs(destination, exist_ok=True)
            listing = await self._lister.list_real(entry.path)
            for child in listing.entries:
                await self._copy_entry(
                    child,
                    os.path.join(destination, child.name),
                    progress,
                    on_progress,
                )
            return

        # copy2 would nest the file inside an existing directory
        if await aiofiles.os.path.isdir(destination):
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), destination)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            partial(shutil.copy2, entry.path, destination, follow_symlinks=False),
        )
        progress.advance(entry.size)
        await self._emit(progress, on_progress)

    async def _remove_tree(self, path: str) -> None:
        if await aiofiles.os.path.isdir(path) and not await aiofiles.os.path.islink(path):
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, shutil.rmtree, path)
        else:
            await aiofiles.os.remove(path)

    @staticmethod
    async def _emit(progress: TransferProgress, on_progress: ProgressCallback | None) -> None:
        """Deliver a progress snapshot and yield to the event loop."""
        if on_progress is not None:
            outcome = on_progress(progress.snapshot())
            if inspect.isawaitable(outcome):
                await outcome
        await asyncio.sleep(0)
