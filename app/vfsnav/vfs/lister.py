"""Virtual directory listing.

Produces a normalized, sorted listing for any path, switching between
real directory enumeration and archive-content enumeration depending on
what the path resolver reports.
"""

import asyncio
import logging
import os
from datetime import UTC, datetime

import aiofiles.os

from vfsnav.core.config import EngineConfig
from vfsnav.vfs.archive import ArchiveReader, is_compressed_tar
from vfsnav.vfs.errors import (
    PathNotFoundError,
    PermissionDeniedError,
    ResolutionExhaustedError,
    VfsError,
)
from vfsnav.vfs.models import (
    ArchiveLocation,
    DirectoryEntry,
    EntryKind,
    Listing,
    NotFound,
    NotFoundReason,
    RealPath,
    extension_of,
    sort_entries,
)
from vfsnav.vfs.resolver import PathResolver, kind_from_mode, read_link

logger = logging.getLogger(__name__)


def _timestamp(value: float | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


def _scan_names(path: str) -> list[tuple[str, EntryKind]]:
    """Read directory entries with their non-following types (blocking)."""
    result: list[tuple[str, EntryKind]] = []
    with os.scandir(path) as it:
        for dirent in it:
            try:
                if dirent.is_symlink():
                    kind = EntryKind.SYMLINK
                elif dirent.is_dir(follow_symlinks=False):
                    kind = EntryKind.DIRECTORY
                else:
                    kind = EntryKind.FILE
            except OSError:
                kind = EntryKind.FILE
            result.append((dirent.name, kind))
    return result


class DirectoryLister:
    """Lists real directories and archive interiors uniformly.

    Args:
        resolver: Path resolver; defaults to one with the standard depth bound.
        archive_reader: Archive tool wrapper; defaults to ``7z``.
    """

    def __init__(
        self,
        resolver: PathResolver | None = None,
        archive_reader: ArchiveReader | None = None,
    ) -> None:
        self._resolver = resolver or PathResolver()
        self._archive_reader = archive_reader or ArchiveReader()

    @classmethod
    def from_config(cls, config: EngineConfig) -> "DirectoryLister":
        """Build a lister from engine configuration."""
        return cls(
            resolver=PathResolver(max_depth=config.max_resolve_depth),
            archive_reader=ArchiveReader(
                config.archive_tool,
                max_output_bytes=config.archive_list_max_bytes,
            ),
        )

    @property
    def resolver(self) -> PathResolver:
        """The path resolver used for virtual paths."""
        return self._resolver

    async def list(self, path: str) -> Listing:
        """List a real directory or a directory inside an archive.

        A path naming a regular file lists that file as an archive root.

        Args:
            path: Absolute real or virtual path.

        Returns:
            Listing with sorted entries and the archive flag.

        Raises:
            PathNotFoundError: If the path resolves to nothing.
            ResolutionExhaustedError: If the archive search hit its depth bound.
            ToolUnavailableError: If the archive tool is missing or fails.
            PermissionDeniedError: If the directory cannot be read.
        """
        path = os.path.abspath(path)
        resolution = await self._resolver.resolve(path)

        if isinstance(resolution, NotFound):
            if resolution.reason == NotFoundReason.EXHAUSTED:
                raise ResolutionExhaustedError(path, self._resolver.max_depth)
            raise PathNotFoundError(path)

        if isinstance(resolution, RealPath):
            if await self._is_listable_directory(resolution):
                return await self.list_real(path)
            resolution = ArchiveLocation(
                archive_file_path=path,
                internal_path="",
                is_compressed_tar_pipeline=is_compressed_tar(path),
            )

        entries = await self._archive_reader.list_children(resolution, path)
        return Listing(path=path, entries=sort_entries(entries), is_archive=True)

    async def list_real(self, path: str) -> Listing:
        """Enumerate a real directory, never consulting archives.

        Children that cannot be stat'ed are still listed, with empty
        metadata.

        Raises:
            PathNotFoundError: If the directory does not exist.
            PermissionDeniedError: If the directory cannot be read.
            VfsError: For any other OS error while reading the directory.
        """
        loop = asyncio.get_running_loop()
        try:
            names = await loop.run_in_executor(None, _scan_names, path)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise PathNotFoundError(path) from e
        except PermissionError as e:
            raise PermissionDeniedError(path, str(e)) from e
        except OSError as e:
            raise VfsError(f"Cannot read directory {path}: {e}") from e

        entries = await asyncio.gather(
            *(self._child_entry(os.path.join(path, name), name, kind) for name, kind in names)
        )
        return Listing(path=path, entries=sort_entries(list(entries)), is_archive=False)

    async def stat_entry(self, path: str) -> DirectoryEntry:
        """Build a DirectoryEntry for one real path.

        Raises:
            OSError: If the path cannot be stat'ed.
        """
        st = await aiofiles.os.stat(path, follow_symlinks=False)
        kind = kind_from_mode(st.st_mode)
        return await self._child_entry(path, os.path.basename(path) or path, kind)

    async def _child_entry(self, path: str, name: str, kind: EntryKind) -> DirectoryEntry:
        """Stat one child best-effort; failures leave metadata empty."""
        size = 0
        modified_at: datetime | None = None
        created_at: datetime | None = None
        target: str | None = None

        try:
            st = await aiofiles.os.stat(path)
            if kind != EntryKind.DIRECTORY:
                size = st.st_size
            modified_at = _timestamp(st.st_mtime)
            created_at = _timestamp(getattr(st, "st_birthtime", None))
        except OSError as e:
            logger.debug("Cannot stat %s: %s", path, e)

        if kind == EntryKind.SYMLINK:
            target = await read_link(path)

        return DirectoryEntry(
            name=name,
            path=path,
            kind=kind,
            size=size,
            modified_at=modified_at,
            created_at=created_at,
            symlink_target=target,
            extension="" if kind == EntryKind.DIRECTORY else extension_of(name),
        )

    async def _is_listable_directory(self, resolution: RealPath) -> bool:
        if resolution.kind == EntryKind.DIRECTORY:
            return True
        if resolution.kind == EntryKind.SYMLINK:
            return bool(await aiofiles.os.path.isdir(resolution.path))
        return False
