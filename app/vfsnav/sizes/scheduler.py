"""Bounded, de-duplicating folder size computation.

A SizeScheduler owns the size cache, a queue of paths awaiting
computation and the map of computations in flight. At most one
computation runs per path, and at most ``concurrency`` run at once.
Results are delivered to subscribers as SizeUpdate events.
"""

import asyncio
import logging
import os
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

import aiofiles.os

from vfsnav.core.config import EngineConfig
from vfsnav.sizes.cache import SizeCache
from vfsnav.vfs.errors import VfsError
from vfsnav.vfs.lister import DirectoryLister
from vfsnav.vfs.models import EntryKind

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3


class SizeState(str, Enum):
    """Where a path is in the size computation lifecycle."""

    UNCACHED = "uncached"
    QUEUED = "queued"
    IN_FLIGHT = "in_flight"
    CACHED = "cached"


@dataclass(frozen=True, slots=True)
class SizeUpdate:
    """A size delivered to subscribers.

    Attributes:
        path: Absolute directory path.
        size_bytes: Recursive size, or None if the computation failed.
        cached: Whether the size came straight from the cache.
    """

    path: str
    size_bytes: int | None
    cached: bool = False


SizeListener = Callable[[SizeUpdate], None]


async def directory_size(lister: DirectoryLister, path: str) -> int:
    """Sum the sizes of all files below a real directory.

    Unreadable subdirectories contribute zero.

    Raises:
        VfsError: If ``path`` itself cannot be listed.
    """
    listing = await lister.list_real(path)
    total = 0
    for entry in listing.entries:
        if entry.kind == EntryKind.DIRECTORY:
            try:
                total += await directory_size(lister, entry.path)
            except VfsError as e:
                logger.debug("Counting unreadable directory %s as empty: %s", entry.path, e)
        else:
            total += entry.size
    return total


async def _modified_at(path: str) -> datetime:
    st = await aiofiles.os.stat(path)
    return datetime.fromtimestamp(st.st_mtime, tz=UTC)


class SizeScheduler:
    """Schedules folder size computations with a concurrency bound.

    All state is touched only from coroutines and callbacks running on
    the event loop, so no locking is involved. ``request_size`` must be
    called from within a running loop.

    Args:
        lister: Directory lister used to walk directories.
        cache: Size cache owned by this scheduler.
        concurrency: Maximum computations in flight.
    """

    def __init__(
        self,
        lister: DirectoryLister | None = None,
        cache: SizeCache | None = None,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            msg = f"concurrency must be positive, got {concurrency}"
            raise ValueError(msg)
        self._lister = lister or DirectoryLister()
        self._cache = cache if cache is not None else SizeCache()
        self._concurrency = concurrency
        self._queue: deque[str] = deque()
        self._queued: set[str] = set()
        self._in_flight: dict[str, asyncio.Task[None]] = {}
        self._listeners: list[SizeListener] = []
        self._closed = False

    @classmethod
    def from_config(
        cls, config: EngineConfig, lister: DirectoryLister | None = None
    ) -> "SizeScheduler":
        """Build a scheduler and its cache from engine configuration."""
        cache = SizeCache(
            max_entries=config.size_cache_max_entries,
            ttl_seconds=config.size_cache_ttl_seconds,
        )
        return cls(
            lister or DirectoryLister.from_config(config),
            cache,
            concurrency=config.size_concurrency,
        )

    @property
    def cache(self) -> SizeCache:
        """The size cache owned by this scheduler."""
        return self._cache

    @property
    def concurrency(self) -> int:
        """Maximum computations in flight."""
        return self._concurrency

    @property
    def pending(self) -> list[str]:
        """Queued paths in the order they will start."""
        return list(self._queue)

    @property
    def in_flight(self) -> list[str]:
        """Paths currently being computed."""
        return list(self._in_flight)

    def subscribe(self, listener: SizeListener) -> Callable[[], None]:
        """Register a listener for size updates.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def state_of(self, path: str) -> SizeState:
        """Report the lifecycle state of a path."""
        path = os.path.abspath(path)
        if path in self._in_flight:
            return SizeState.IN_FLIGHT
        if path in self._queued:
            return SizeState.QUEUED
        entry = self._cache.peek(path)
        if entry is not None and not self._cache.is_expired(entry):
            return SizeState.CACHED
        return SizeState.UNCACHED

    def request_size(self, path: str, modified_at: datetime | None = None) -> None:
        """Request the size of a directory without waiting for it.

        A fresh cache hit is delivered immediately. A path that is already
        queued or in flight is left alone; its pending result will be
        delivered to subscribers when it completes.

        Args:
            path: Directory to size.
            modified_at: The directory's modification time as last seen by
                the caller. When given, a matching cache entry is used
                without touching the filesystem.
        """
        if self._closed:
            logger.debug("Ignoring size request for %s: scheduler closed", path)
            return

        path = os.path.abspath(path)
        if path in self._in_flight or path in self._queued:
            return

        if modified_at is not None:
            entry = self._cache.get(path, modified_at)
            if entry is not None:
                logger.debug("Size cache hit for %s", path)
                self._deliver(SizeUpdate(path, entry.size_bytes, cached=True))
                return

        self._queue.append(path)
        self._queued.add(path)
        self._drain()

    def cancel_pending(self, directory: str | None = None) -> int:
        """Drop queued computations that have not started.

        In-flight computations are not affected; they still complete and
        populate the cache.

        Args:
            directory: Only drop paths directly inside this directory.
                None drops every queued path.

        Returns:
            Number of dropped paths.
        """
        if directory is None:
            dropped = len(self._queue)
            self._queue.clear()
            self._queued.clear()
        else:
            parent = os.path.abspath(directory)
            kept = deque(p for p in self._queue if os.path.dirname(p) != parent)
            dropped = len(self._queue) - len(kept)
            self._queue = kept
            self._queued = set(kept)

        if dropped:
            logger.debug("Cancelled %d queued size computation(s)", dropped)
        return dropped

    async def wait_idle(self) -> None:
        """Wait until the queue is empty and nothing is in flight."""
        while self._in_flight:
            await asyncio.gather(*self._in_flight.values(), return_exceptions=True)

    async def close(self) -> None:
        """Cancel queued work and wait for in-flight computations."""
        self._closed = True
        self.cancel_pending()
        await self.wait_idle()
        self._listeners.clear()

    async def __aenter__(self) -> "SizeScheduler":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # === Internals ===

    def _drain(self) -> None:
        """Start queued computations up to the concurrency bound."""
        while self._queue and len(self._in_flight) < self._concurrency:
            path = self._queue.popleft()
            self._queued.discard(path)
            logger.debug("Starting size computation for %s", path)
            self._in_flight[path] = asyncio.create_task(self._compute(path))

    async def _compute(self, path: str) -> None:
        update = SizeUpdate(path, None)
        try:
            modified_at = await _modified_at(path)
            entry = self._cache.get(path, modified_at)
            if entry is not None:
                update = SizeUpdate(path, entry.size_bytes, cached=True)
            else:
                size = await directory_size(self._lister, path)
                self._cache.put(path, size, modified_at)
                update = SizeUpdate(path, size)
        except (OSError, VfsError) as e:
            logger.debug("Size computation for %s failed: %s", path, e)
        except Exception:
            logger.exception("Unexpected error computing the size of %s", path)
        finally:
            self._in_flight.pop(path, None)
            self._deliver(update)
            if not self._closed:
                self._drain()

    def _deliver(self, update: SizeUpdate) -> None:
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception:
                logger.exception("Size listener failed for %s", update.path)
