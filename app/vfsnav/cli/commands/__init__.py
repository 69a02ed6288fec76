"""CLI commands for vfsnav.

This package contains all subcommand implementations.
"""

from vfsnav.cli.commands import config, extract, listing, sizes, transfer

__all__ = ["config", "extract", "listing", "sizes", "transfer"]
