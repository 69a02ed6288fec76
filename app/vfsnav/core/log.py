"""Logging setup for the command-line front-end.

Library modules only create module-level loggers; handlers are
installed here, once, by the CLI.
"""

import logging

from rich.logging import RichHandler

from vfsnav.utils.formatting import err_console

_NOISY_LOGGERS = ("asyncio",)


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=verbose)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
