"""Self-drop filtering for transfer batches.

The transfer engine does not detect cycles. Callers run their items
through these helpers first so that a directory is never copied or
moved onto itself, into its own subtree, or back into its own parent.
"""

import logging
import os

from vfsnav.transfer.models import TransferItem

logger = logging.getLogger(__name__)


def _normalize(path: str) -> str:
    return os.path.normpath(os.path.abspath(path))


def _is_inside(path: str, ancestor: str) -> bool:
    """Check if normalized ``path`` lies strictly below normalized ``ancestor``."""
    if ancestor == os.sep:
        return path != os.sep
    return path.startswith(ancestor + os.sep)


def is_self_drop(item: TransferItem) -> bool:
    """Check if transferring an item would be a no-op or corrupt data.

    True when the destination is the source itself, the source's current
    parent directory, or any path inside the source.
    """
    source = _normalize(item.source)
    destination = _normalize(item.destination)

    if destination == source:
        return True
    if destination == os.path.dirname(source):
        return True
    return _is_inside(destination, source)


def filter_self_drops(items: list[TransferItem]) -> list[TransferItem]:
    """Drop items that are self-drops, keeping the order of the rest."""
    kept: list[TransferItem] = []
    for item in items:
        if is_self_drop(item):
            logger.debug("Skipping self-drop %s -> %s", item.source, item.destination)
            continue
        kept.append(item)
    return kept


def plan_drop(sources: list[str], target_dir: str) -> list[TransferItem]:
    """Build transfer items for dropping ``sources`` into ``target_dir``.

    Each source keeps its name under the target directory. Sources that
    already live in the target directory, and sources that are the target
    directory or one of its ancestors, are skipped.

    Args:
        sources: Paths being dropped.
        target_dir: Directory receiving them.

    Returns:
        Items safe to hand to the transfer engine.
    """
    target = _normalize(target_dir)
    items: list[TransferItem] = []

    for source_path in sources:
        source = _normalize(source_path)
        if os.path.dirname(source) == target:
            logger.debug("Skipping %s: already in %s", source, target)
            continue
        if source == target or _is_inside(target, source):
            logger.debug("Skipping %s: target lies inside it", source)
            continue
        destination = os.path.join(target, os.path.basename(source))
        items.append(TransferItem(source=source, destination=destination))

    return filter_self_drops(items)
