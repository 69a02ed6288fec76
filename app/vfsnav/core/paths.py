"""XDG locations of vfsnav's files.

- ``$XDG_CONFIG_HOME/vfsnav/config.toml``: engine configuration
- ``$XDG_CONFIG_HOME/vfsnav/theme.toml``: optional color overrides
- ``$XDG_CACHE_HOME/vfsnav/folder-sizes.json``: persisted folder sizes

Unset or empty XDG variables fall back to ``~/.config`` and ``~/.cache``.
Nothing here creates directories; writers create parents as needed.
"""

import os
from pathlib import Path

APP_NAME = "vfsnav"


def _app_dir(env_var: str, fallback: str) -> Path:
    base = os.environ.get(env_var) or str(Path.home() / fallback)
    return Path(base) / APP_NAME


def get_config_dir() -> Path:
    """Directory holding configuration and theme files."""
    return _app_dir("XDG_CONFIG_HOME", ".config")


def get_cache_dir() -> Path:
    """Directory holding regenerable data such as folder sizes."""
    return _app_dir("XDG_CACHE_HOME", ".cache")


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_size_cache_path() -> Path:
    return get_cache_dir() / "folder-sizes.json"
