"""Utility modules for vfsnav.

This module exports the subprocess helpers shared by archive listing
and extraction. Console helpers live in ``vfsnav.utils.formatting``.
"""

from vfsnav.utils.shell import CommandResult, command_exists, run_command, run_pipeline

__all__ = [
    "CommandResult",
    "command_exists",
    "run_command",
    "run_pipeline",
]
