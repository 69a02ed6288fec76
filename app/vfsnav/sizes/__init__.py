"""Lazily computed, cached directory sizes."""

from vfsnav.sizes.cache import SizeCache, SizeCacheEntry
from vfsnav.sizes.scheduler import SizeScheduler, SizeState, SizeUpdate, directory_size

__all__ = [
    "SizeCache",
    "SizeCacheEntry",
    "SizeScheduler",
    "SizeState",
    "SizeUpdate",
    "directory_size",
]
