"""Engine configuration and settings.

This module provides the configuration model and I/O functions for the
browsing engine: size scheduler limits, cache bounds, archive tool
settings and the path resolver's depth bound.

Configuration is stored in ~/.config/vfsnav/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vfsnav.core.paths import get_config_path

logger = logging.getLogger(__name__)

# Listing output cap for the archive tool (10 MiB)
DEFAULT_ARCHIVE_LIST_MAX_BYTES = 10 * 1024 * 1024


class EngineConfig(BaseModel):
    """Configuration for the browsing engine.

    Attributes:
        size_concurrency: Maximum folder size computations running at once.
        size_cache_ttl_seconds: Age after which a cached size is stale.
        size_cache_max_entries: Ceiling for cached folder sizes.
        max_resolve_depth: Parent lookups allowed when locating an archive.
        archive_tool: Executable used to list archive contents.
        archive_list_max_bytes: Largest accepted archive listing output.
        calculate_folder_sizes: Whether folder sizes are computed at all.
        persist_size_cache: Whether folder sizes survive between runs.
    """

    model_config = ConfigDict(extra="forbid")

    size_concurrency: Annotated[
        int,
        Field(ge=1, le=32, description="Concurrent folder size computations (1-32)"),
    ] = 3
    size_cache_ttl_seconds: Annotated[
        int,
        Field(ge=1, description="Seconds before a cached folder size is stale"),
    ] = 300
    size_cache_max_entries: Annotated[
        int,
        Field(ge=1, description="Maximum number of cached folder sizes"),
    ] = 500
    max_resolve_depth: Annotated[
        int,
        Field(ge=1, le=256, description="Parent lookups when locating an archive"),
    ] = 20
    archive_tool: Annotated[
        str,
        Field(min_length=1, description="Archive listing executable"),
    ] = "7z"
    archive_list_max_bytes: Annotated[
        int,
        Field(ge=1024, description="Maximum archive listing output in bytes"),
    ] = DEFAULT_ARCHIVE_LIST_MAX_BYTES
    calculate_folder_sizes: Annotated[
        bool,
        Field(description="Compute folder sizes in the background"),
    ] = True
    persist_size_cache: Annotated[
        bool,
        Field(description="Keep folder sizes between runs"),
    ] = True


class ConfigError(Exception):
    """Base exception for engine configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> EngineConfig:
    """Load engine configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated EngineConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return EngineConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> EngineConfig:
    """Load the engine configuration, falling back to defaults if absent.

    Parse and schema errors still propagate; only a missing file is
    replaced by the defaults.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return EngineConfig()


def save_config(
    config: EngineConfig,
    path: Path | None = None,
    *,
    include_defaults: bool = False,
) -> Path:
    """Save engine configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The EngineConfig object to save.
        path: Path to save the config. If None, uses the default config path.
        include_defaults: Write every field, not only the changed ones.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump() if include_defaults else _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: EngineConfig) -> dict[str, object]:
    """Convert EngineConfig to a dictionary for TOML serialization.

    Only includes values that differ from the defaults to keep the
    file clean.
    """
    defaults = EngineConfig()
    return {
        key: value
        for key, value in config.model_dump().items()
        if value != getattr(defaults, key)
    }
