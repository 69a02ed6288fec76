"""Transfer domain models.

This module defines the data structures for batched copy/move
transfers: submitted items, progress counters, and per-item and
per-batch outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum

from vfsnav.vfs.errors import PartialFailureError


class TransferMode(str, Enum):
    """How items are transferred.

    Attributes:
        COPY: Sources are copied and left in place.
        MOVE: Sources are renamed, or copied then deleted across devices.
    """

    COPY = "copy"
    MOVE = "move"


@dataclass(frozen=True, slots=True)
class TransferItem:
    """One source/destination pair of a transfer batch.

    Attributes:
        source: Existing real path to transfer.
        destination: Full target path (not the target directory).
    """

    source: str
    destination: str

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if not self.source or not self.destination:
            msg = "Transfer source and destination cannot be empty"
            raise ValueError(msg)


@dataclass(slots=True)
class TransferProgress:
    """Byte and file counters for one transfer batch.

    ``total_bytes`` is fixed by the scan phase and is never below 1.
    The ``processed_*`` counters only grow.

    Attributes:
        total_bytes: Bytes found by the scan phase (minimum 1).
        processed_bytes: Bytes transferred so far.
        total_files: Files found by the scan phase.
        processed_files: Files transferred so far.
    """

    total_bytes: int = 1
    processed_bytes: int = 0
    total_files: int = 0
    processed_files: int = 0

    def __post_init__(self) -> None:
        """Clamp the byte total so percentages never divide by zero."""
        self.total_bytes = max(1, self.total_bytes)

    @property
    def percent(self) -> float:
        """Completion percentage, clamped to [0, 100]."""
        return max(0.0, min(100.0, self.processed_bytes / self.total_bytes * 100))

    def advance(self, size: int, files: int = 1) -> None:
        """Credit transferred bytes and files."""
        self.processed_bytes += max(0, size)
        self.processed_files += max(0, files)

    def snapshot(self) -> "TransferProgress":
        """Return a copy for listeners, with bytes clamped to the total."""
        return TransferProgress(
            total_bytes=self.total_bytes,
            processed_bytes=min(self.processed_bytes, self.total_bytes),
            total_files=self.total_files,
            processed_files=min(self.processed_files, self.total_files)
            if self.total_files
            else self.processed_files,
        )


@dataclass(frozen=True, slots=True)
class TransferItemResult:
    """Outcome of transferring one item.

    Attributes:
        source: Source path of the item.
        destination: Destination path of the item.
        success: Whether the item was transferred completely.
        error: Error message if the transfer failed, None otherwise.
    """

    source: str
    destination: str
    success: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class TransferResult:
    """Outcome of a transfer batch.

    A batch succeeds once every item has been attempted, even if some
    items failed; those are listed in ``failures``. ``success`` is False
    only when an error escaped the per-item handling.

    Attributes:
        success: Whether the batch ran to completion.
        error: Aggregate error message when ``success`` is False.
        items: Per-item outcomes in submission order.
        progress: Final progress counters.
    """

    success: bool
    error: str | None = None
    items: tuple[TransferItemResult, ...] = ()
    progress: TransferProgress = field(default_factory=TransferProgress)

    @property
    def failures(self) -> list[TransferItemResult]:
        """Items that failed."""
        return [r for r in self.items if not r.success]

    @property
    def partial(self) -> bool:
        """Check if the batch completed with some failed items."""
        return self.success and bool(self.failures)

    def raise_for_failures(self) -> None:
        """Raise PartialFailureError if any item failed.

        Raises:
            PartialFailureError: Carrying the failed item results.
        """
        failures = self.failures
        if failures:
            raise PartialFailureError(failures)
