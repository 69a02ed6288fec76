"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table

from vfsnav.core.theme import get_theme
from vfsnav.vfs.models import DirectoryEntry, EntryKind

_ARCHIVE_EXTENSIONS = frozenset(
    {"zip", "7z", "rar", "tar", "gz", "tgz", "bz2", "tbz2", "xz", "txz"}
)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string; unknown sizes render as "-"."""
    if size_bytes is None:
        return "-"
    if size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def create_listing_table(title: str) -> Table:
    """Create a pre-configured table for displaying directory entries.

    Args:
        title: Table title, usually the listed path.

    Returns:
        Rich Table configured for listing display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Size", style="info", justify="right")
    table.add_column("Modified", style="muted")
    table.add_column("Type", style="muted")
    return table


def format_entry_row(entry: DirectoryEntry, size: int | None = None) -> tuple[str, str, str, str]:
    """Format a directory entry as a table row with proper styling.

    Args:
        entry: The entry to format.
        size: Overrides the entry size (used for computed folder sizes).

    Returns:
        Tuple of (name, size, modified, type) with Rich markup.
    """
    if entry.kind == EntryKind.DIRECTORY:
        name = f"[directory]{entry.name}/[/]"
        size_str = format_size(size) if size is not None else "-"
    elif entry.kind == EntryKind.SYMLINK:
        name = f"[symlink]{entry.name}[/] [muted]-> {entry.symlink_target or '?'}[/]"
        size_str = format_size(entry.size)
    elif entry.extension in _ARCHIVE_EXTENSIONS:
        name = f"[archive]{entry.name}[/]"
        size_str = format_size(entry.size)
    else:
        name = f"[text]{entry.name}[/]"
        size_str = format_size(entry.size)

    modified = entry.modified_at.strftime("%Y-%m-%d %H:%M") if entry.modified_at else "-"
    kind = entry.extension or entry.kind.value
    return (name, size_str, modified, kind)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
