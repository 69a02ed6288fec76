"""Console color theme.

Colors come from the bundled ``data/theme.toml``; a ``theme.toml`` in the
vfsnav config directory may override any subset of them. Every color
name doubles as a rich style name, so markup such as ``[directory]`` or
``[archive]`` works in all console output.
"""

import logging
import re
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from vfsnav.core.paths import get_config_dir

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")

# Style attributes layered on top of a color, by style name
_MODIFIERS = {
    "error": "bold",
    "directory": "bold",
    "symlink": "italic",
}


class ThemeColors(BaseModel):
    """Hex colors for console output.

    The first group styles messages; the second styles listing entries
    by kind.
    """

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    directory: str = "#0e8ac8"
    symlink: str = "#d44ebc"
    archive: str = "#faf870"

    @field_validator("*", mode="before")
    @classmethod
    def _check_hex(cls, value: object) -> str:
        if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value.strip()):
            msg = f"expected a #RGB or #RRGGBB color, got {value!r}"
            raise ValueError(msg)
        return value.strip()


def get_user_theme_path() -> Path:
    """Path of the optional user theme override."""
    return get_config_dir() / "theme.toml"


def read_color_table(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are dropped. A missing or unreadable file yields an
    empty table; unreadable files are logged.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return {name: value for name, value in table.items() if isinstance(value, str)}


def load_theme_colors(user_path: Path | None = None) -> ThemeColors:
    """Merge the user override onto the bundled colors.

    An override that fails validation is discarded as a whole.

    Args:
        user_path: Override file; defaults to the config directory's theme.
    """
    bundled = read_color_table(Path(str(resources.files("vfsnav.data") / "theme.toml")))
    override = read_color_table(user_path or get_user_theme_path())

    try:
        return ThemeColors(**{**bundled, **override})
    except ValidationError as e:
        logger.warning("Invalid theme override, using bundled colors: %s", e)
        return ThemeColors(**bundled)


def build_theme(colors: ThemeColors) -> Theme:
    """Turn colors into rich styles, adding the derived ``bold_header`` and ``dim``."""
    styles = {
        name: f"{_MODIFIERS[name]} {color}" if name in _MODIFIERS else color
        for name, color in colors.model_dump().items()
    }
    styles["bold_header"] = f"bold {colors.header}"
    styles["dim"] = colors.muted
    return Theme(styles)


@cache
def get_theme() -> Theme:
    """The process-wide console theme, loaded once."""
    return build_theme(load_theme_colors())
