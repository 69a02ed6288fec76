"""Folder size cache with modification-time validation.

Entries are kept in insertion order. Lookups only return entries whose
recorded directory modification time matches exactly and whose age is
within the time-to-live; inserting beyond the ceiling drops the oldest
inserted entries first.
"""

import json
import logging
import os
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 500
DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class SizeCacheEntry:
    """A computed folder size.

    Attributes:
        path: Absolute directory path.
        size_bytes: Recursive size of the directory's files.
        source_modified_at: Directory modification time when computed.
        cached_at: Epoch seconds when the entry was stored.
    """

    path: str
    size_bytes: int
    source_modified_at: datetime | None
    cached_at: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "size": self.size_bytes,
            "mtime": self.source_modified_at.isoformat() if self.source_modified_at else None,
            "ts": self.cached_at,
        }

    @classmethod
    def from_dict(cls, path: str, data: dict[str, Any]) -> "SizeCacheEntry":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If a field has an invalid value.
            TypeError: If a field has the wrong type.
        """
        mtime = data.get("mtime")
        return cls(
            path=path,
            size_bytes=int(data["size"]),
            source_modified_at=datetime.fromisoformat(mtime) if mtime else None,
            cached_at=float(data["ts"]),
        )


class SizeCache:
    """Bounded, insertion-ordered folder size cache.

    Owned by a single SizeScheduler; consumers read through it.

    Args:
        max_entries: Ceiling on stored entries.
        ttl_seconds: Age after which an entry is stale.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries < 1:
            msg = f"max_entries must be positive, got {max_entries}"
            raise ValueError(msg)
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, SizeCacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    @property
    def max_entries(self) -> int:
        """Ceiling on stored entries."""
        return self._max_entries

    def is_expired(self, entry: SizeCacheEntry) -> bool:
        """Check if an entry is older than the time-to-live."""
        return self._clock() - entry.cached_at >= self._ttl_seconds

    def peek(self, path: str) -> SizeCacheEntry | None:
        """Return the stored entry for a path, fresh or not."""
        return self._entries.get(path)

    def get(self, path: str, modified_at: datetime | None) -> SizeCacheEntry | None:
        """Return a fresh entry for a path.

        Stale entries (modification time mismatch or expired) are ignored
        but kept; the next ``put`` for the path overwrites them.

        Args:
            path: Absolute directory path.
            modified_at: The directory's current modification time.

        Returns:
            The entry if fresh, None otherwise.
        """
        entry = self._entries.get(path)
        if entry is None:
            return None
        if entry.source_modified_at != modified_at or self.is_expired(entry):
            return None
        return entry

    def put(self, path: str, size_bytes: int, modified_at: datetime | None) -> SizeCacheEntry:
        """Store a computed size, replacing any previous entry for the path.

        A replaced entry moves to the newest insertion position.
        """
        entry = SizeCacheEntry(
            path=path,
            size_bytes=size_bytes,
            source_modified_at=modified_at,
            cached_at=self._clock(),
        )
        self._entries.pop(path, None)
        self._entries[path] = entry
        self.trim()
        return entry

    def invalidate(self, path: str) -> bool:
        """Drop the entry for a path. Returns True if one existed."""
        return self._entries.pop(path, None) is not None

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def trim(self) -> int:
        """Evict oldest-inserted entries down to the ceiling.

        Returns:
            Number of evicted entries.
        """
        evicted = 0
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
            evicted += 1
        return evicted

    def entries(self) -> list[SizeCacheEntry]:
        """Entries from oldest to newest insertion."""
        return list(self._entries.values())

    def load(self, path: Path) -> int:
        """Load entries from a JSON snapshot, appending in file order.

        A missing file loads nothing; corrupt files and corrupt entries
        are skipped with a warning.

        Returns:
            Number of entries loaded.
        """
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return 0
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable size cache %s: %s", path, e)
            return 0

        if not isinstance(data, dict):
            logger.warning("Ignoring size cache %s: expected an object", path)
            return 0

        loaded = 0
        for dir_path, raw in data.items():
            if not isinstance(raw, dict):
                logger.warning("Skipping corrupt size cache entry %s", dir_path)
                continue
            try:
                entry = SizeCacheEntry.from_dict(dir_path, raw)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping corrupt size cache entry %s: %s", dir_path, e)
                continue
            self._entries.pop(dir_path, None)
            self._entries[dir_path] = entry
            loaded += 1

        self.trim()
        return loaded

    def save(self, path: Path) -> Path:
        """Write the cache to a JSON snapshot atomically.

        Raises:
            OSError: If the file cannot be written.
        """
        self.trim()
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {entry.path: entry.to_dict() for entry in self._entries.values()}

        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                json.dump(data, f)
            os.replace(str(tmp_path), str(path))
        except OSError:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise
        return path
