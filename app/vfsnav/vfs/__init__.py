"""Virtual filesystem: path resolution and directory listing.

This module resolves paths that may reach into archive files and lists
real directories and archive interiors through one interface.
"""

from vfsnav.vfs.archive import ArchiveReader, child_entries, parse_technical_listing
from vfsnav.vfs.errors import (
    PartialFailureError,
    PathNotFoundError,
    PermissionDeniedError,
    ResolutionExhaustedError,
    ToolUnavailableError,
    VfsError,
)
from vfsnav.vfs.lister import DirectoryLister
from vfsnav.vfs.models import (
    ArchiveLocation,
    ArchiveRecord,
    DirectoryEntry,
    EntryKind,
    Listing,
    NotFound,
    NotFoundReason,
    RealPath,
)
from vfsnav.vfs.resolver import PathResolver

__all__ = [
    "ArchiveLocation",
    "ArchiveReader",
    "ArchiveRecord",
    "DirectoryEntry",
    "DirectoryLister",
    "EntryKind",
    "Listing",
    "NotFound",
    "NotFoundReason",
    "PartialFailureError",
    "PathNotFoundError",
    "PathResolver",
    "PermissionDeniedError",
    "RealPath",
    "ResolutionExhaustedError",
    "ToolUnavailableError",
    "VfsError",
    "child_entries",
    "parse_technical_listing",
]
