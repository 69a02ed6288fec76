"""Virtual filesystem domain models.

This module defines the data structures shared by the path resolver
and the directory lister: listed entries, resolver outcomes, parsed
archive records and complete listings.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class EntryKind(str, Enum):
    """Type of a listed entry.

    Attributes:
        DIRECTORY: Directory, real or synthesized from archive contents.
        FILE: Regular file (or a member of an archive).
        SYMLINK: Symbolic link; never followed while listing.
    """

    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"


class NotFoundReason(str, Enum):
    """Why a path resolved to nothing.

    Attributes:
        MISSING: Neither the path nor any ancestor is a regular file.
        DIRECTORY_HIT: A real directory was reached before any file.
        EXHAUSTED: The upward search gave up after its depth bound.
    """

    MISSING = "missing"
    DIRECTORY_HIT = "directory_hit"
    EXHAUSTED = "exhausted"


def extension_of(name: str) -> str:
    """Return the lowercase extension of a file name, without the dot.

    Leading dots (hidden files such as ``.bashrc``) do not start an
    extension.
    """
    stem = name.lstrip(".")
    if "." not in stem:
        return ""
    return stem.rsplit(".", 1)[1].lower()


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """One item of a directory listing.

    Attributes:
        name: Entry name, never containing a path separator.
        path: Absolute path of the entry (virtual for archive members).
        kind: Directory, file or symlink.
        size: Size in bytes; 0 for directories.
        modified_at: Last modification time (UTC), if known.
        created_at: Creation time (UTC), if known. Absent for archive members.
        symlink_target: Link target as stored, for symlinks only.
        extension: Lowercase extension without dot; empty for directories.
    """

    name: str
    path: str
    kind: EntryKind
    size: int = 0
    modified_at: datetime | None = None
    created_at: datetime | None = None
    symlink_target: str | None = None
    extension: str = ""

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.name or "/" in self.name:
            msg = f"Invalid entry name: {self.name!r}"
            raise ValueError(msg)

    @property
    def is_directory(self) -> bool:
        """Check if the entry is a directory."""
        return self.kind == EntryKind.DIRECTORY


def sort_entries(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    """Order entries directories-first, then case-insensitively by name."""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name.casefold(), e.name))


@dataclass(frozen=True, slots=True)
class RealPath:
    """Resolver outcome for a path that exists on disk.

    Attributes:
        path: The resolved path.
        kind: Entry kind from a non-following stat.
        symlink_target: Link target when ``kind`` is SYMLINK.
    """

    path: str
    kind: EntryKind
    symlink_target: str | None = None


@dataclass(frozen=True, slots=True)
class ArchiveLocation:
    """Resolver outcome for a path nested inside an archive file.

    Attributes:
        archive_file_path: The real, existing regular file on disk.
        internal_path: Slash-separated path inside the archive; empty
            for the archive root.
        is_compressed_tar_pipeline: Whether listing must decompress the
            archive to a stream and read it as a tar.
    """

    archive_file_path: str
    internal_path: str = ""
    is_compressed_tar_pipeline: bool = False


@dataclass(frozen=True, slots=True)
class NotFound:
    """Resolver outcome for a path that denotes nothing."""

    path: str
    reason: NotFoundReason = NotFoundReason.MISSING


Resolution = RealPath | ArchiveLocation | NotFound


@dataclass(frozen=True, slots=True)
class ArchiveRecord:
    """One entry of an archive tool's technical listing.

    Attributes:
        path: Slash-normalized path inside the archive.
        size: Uncompressed size in bytes.
        attributes: Raw attribute string (``D`` marks directories).
        modified_at: Modification time, if the tool reported one.
        is_folder: Whether the tool flagged the entry as a folder.
    """

    path: str
    size: int = 0
    attributes: str = ""
    modified_at: datetime | None = None
    is_folder: bool = False

    @property
    def marks_directory(self) -> bool:
        """Check if the record is explicitly a directory."""
        return self.is_folder or "D" in self.attributes


@dataclass(frozen=True, slots=True)
class Listing:
    """Result of listing a real or virtual directory.

    Attributes:
        path: The requested path.
        entries: Sorted directory entries.
        is_archive: True when the listing came from inside an archive.
    """

    path: str
    entries: list[DirectoryEntry] = field(default_factory=list)
    is_archive: bool = False

    @property
    def names(self) -> list[str]:
        """Entry names in listing order."""
        return [e.name for e in self.entries]
