"""CLI package for vfsnav.

This package contains the Typer application and all subcommands.
"""

from vfsnav.cli.main import app

__all__ = ["app"]
