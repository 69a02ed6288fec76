"""Batched copy/move transfers.

This module provides the transfer engine, its result and progress
models, the caller-side self-drop guard, and one-shot extraction.
"""

from vfsnav.transfer.engine import TransferEngine
from vfsnav.transfer.extract import ExtractionResult, extract_archive
from vfsnav.transfer.guard import filter_self_drops, is_self_drop, plan_drop
from vfsnav.transfer.models import (
    TransferItem,
    TransferItemResult,
    TransferMode,
    TransferProgress,
    TransferResult,
)

__all__ = [
    "ExtractionResult",
    "TransferEngine",
    "TransferItem",
    "TransferItemResult",
    "TransferMode",
    "TransferProgress",
    "TransferResult",
    "extract_archive",
    "filter_self_drops",
    "is_self_drop",
    "plan_drop",
]
