"""Path resolution into real entries and archive interiors.

A virtual path either exists on disk, or has a regular file (the
archive) as one of its ancestors, or denotes nothing. Resolution stats
the path itself first and only walks upward when that stat reports
"not found" or "not a directory".
"""

import logging
import os
import stat

import aiofiles.os

from vfsnav.vfs.archive import is_compressed_tar
from vfsnav.vfs.errors import PathNotFoundError, PermissionDeniedError
from vfsnav.vfs.models import (
    ArchiveLocation,
    EntryKind,
    NotFound,
    NotFoundReason,
    RealPath,
    Resolution,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 20


def kind_from_mode(mode: int) -> EntryKind:
    """Map an ``st_mode`` from a non-following stat to an entry kind."""
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    return EntryKind.FILE


async def read_link(path: str) -> str | None:
    """Read a symlink target without following it; None if unreadable."""
    try:
        return await aiofiles.os.readlink(path)
    except OSError:
        return None


class PathResolver:
    """Resolves virtual paths.

    Args:
        max_depth: Maximum number of parent lookups when searching for
            the archive file containing a path.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            msg = f"max_depth must be positive, got {max_depth}"
            raise ValueError(msg)
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        """Maximum number of parent lookups."""
        return self._max_depth

    async def resolve(self, path: str) -> Resolution:
        """Resolve a path to a real entry, an archive location, or nothing.

        Args:
            path: Absolute path, possibly reaching into an archive.

        Returns:
            RealPath if the path exists as-is (symlinks are not followed),
            ArchiveLocation if an ancestor is a regular file, NotFound otherwise.

        Raises:
            PermissionDeniedError: If the OS refuses a stat.
            PathNotFoundError: If a stat fails for any other reason, such as
                a symlink loop or an overlong name.
        """
        path = os.path.abspath(path)
        try:
            st = await aiofiles.os.stat(path, follow_symlinks=False)
        except (FileNotFoundError, NotADirectoryError):
            return await self._locate_archive(path)
        except PermissionError as e:
            raise PermissionDeniedError(path, str(e)) from e
        except OSError as e:
            raise PathNotFoundError(path, f"Cannot resolve {path}: {e.strerror or e}") from e

        kind = kind_from_mode(st.st_mode)
        target = await read_link(path) if kind == EntryKind.SYMLINK else None
        return RealPath(path=path, kind=kind, symlink_target=target)

    async def _locate_archive(self, path: str) -> Resolution:
        """Walk upward from a missing path until a regular file is found."""
        current = path
        internal = ""

        for _ in range(self._max_depth):
            parent = os.path.dirname(current)
            if parent == current:
                return NotFound(path=path, reason=NotFoundReason.MISSING)

            name = os.path.basename(current)
            internal = f"{name}/{internal}" if internal else name
            current = parent

            try:
                st = await aiofiles.os.stat(current)
            except (FileNotFoundError, NotADirectoryError):
                continue
            except PermissionError as e:
                raise PermissionDeniedError(current, str(e)) from e
            except OSError as e:
                raise PathNotFoundError(path, f"Cannot resolve {path}: {e.strerror or e}") from e

            if stat.S_ISREG(st.st_mode):
                logger.debug("Resolved %s into archive %s at %r", path, current, internal)
                return ArchiveLocation(
                    archive_file_path=current,
                    internal_path=internal,
                    is_compressed_tar_pipeline=is_compressed_tar(current),
                )
            return NotFound(path=path, reason=NotFoundReason.DIRECTORY_HIT)

        logger.debug("Gave up resolving %s after %d lookups", path, self._max_depth)
        return NotFound(path=path, reason=NotFoundReason.EXHAUSTED)
