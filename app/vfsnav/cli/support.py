"""Shared helpers for CLI commands."""

import logging

import typer

from vfsnav.core.config import ConfigError, EngineConfig, load_config_or_default
from vfsnav.core.paths import get_size_cache_path
from vfsnav.sizes.scheduler import SizeScheduler, SizeUpdate
from vfsnav.utils.formatting import print_error
from vfsnav.vfs.lister import DirectoryLister
from vfsnav.vfs.models import DirectoryEntry

logger = logging.getLogger(__name__)


def require_config() -> EngineConfig:
    """Load the engine configuration or exit with an error.

    Returns:
        The configuration, or defaults if no config file exists.

    Raises:
        typer.Exit: If the config file is invalid.
    """
    try:
        return load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


async def measure_directories(
    entries: list[DirectoryEntry],
    config: EngineConfig,
    lister: DirectoryLister,
) -> dict[str, int | None]:
    """Compute folder sizes through a scheduler and the persisted cache.

    Args:
        entries: Directory entries to size.
        config: Engine configuration (concurrency, cache bounds, persistence).
        lister: Lister used to walk the directories.

    Returns:
        Mapping of directory path to size, None where the walk failed.
    """
    sizes: dict[str, int | None] = {}
    if not entries:
        return sizes

    scheduler = SizeScheduler.from_config(config, lister)
    cache_path = get_size_cache_path()
    if config.persist_size_cache:
        scheduler.cache.load(cache_path)

    def record(update: SizeUpdate) -> None:
        sizes[update.path] = update.size_bytes

    scheduler.subscribe(record)
    async with scheduler:
        for entry in entries:
            scheduler.request_size(entry.path, entry.modified_at)
        await scheduler.wait_idle()

    if config.persist_size_cache:
        try:
            scheduler.cache.save(cache_path)
        except OSError as e:
            logger.warning("Could not save size cache: %s", e)

    return sizes
