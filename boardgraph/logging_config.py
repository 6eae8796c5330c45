"""Logging setup for the command-line entry point."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int = logging.WARNING) -> None:
    """Route the `boardgraph` logger through rich on stderr.

    Library code only creates module loggers; handlers are installed here so that
    embedding applications keep control of their own logging.
    """
    logger = logging.getLogger("boardgraph")
    logger.setLevel(level)

    # Avoid duplicate handlers when the CLI is invoked repeatedly in one process.
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
