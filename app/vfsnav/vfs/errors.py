"""Error taxonomy for path resolution, listing and transfers.

All errors raised by the engine derive from VfsError so callers can
surface a single message for a failed directory view.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vfsnav.transfer.models import TransferItemResult


class VfsError(Exception):
    """Base exception for vfsnav engine errors."""


class PathNotFoundError(VfsError):
    """Raised when a path resolves to nothing, real or virtual."""

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"Path not found: {path}")


class ResolutionExhaustedError(PathNotFoundError):
    """Raised when the upward archive search exceeds its depth bound."""

    def __init__(self, path: str, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(
            path,
            f"Path not found: {path} (gave up after {max_depth} parent lookups)",
        )


class ToolUnavailableError(VfsError):
    """Raised when a required external archive tool is missing or fails."""

    def __init__(self, tool: str, detail: str) -> None:
        self.tool = tool
        self.detail = detail
        super().__init__(f"Failed to read archive ({tool} required): {detail}")


class PermissionDeniedError(VfsError):
    """Raised when the OS refuses a stat, read or write."""

    def __init__(self, path: str, detail: str | None = None) -> None:
        self.path = path
        super().__init__(f"Permission denied: {path}" + (f" ({detail})" if detail else ""))


class PartialFailureError(VfsError):
    """Raised on request when some items of a transfer batch failed."""

    def __init__(self, failures: list[TransferItemResult]) -> None:
        self.failures = failures
        super().__init__(f"{len(failures)} item(s) failed to transfer")
