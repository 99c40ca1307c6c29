"""Logging setup for command-line use.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, by the CLI, and never on import.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO", *, console: Console | None = None) -> None:
    """Route the ``sigilforge`` logger through a Rich handler on stderr."""
    logger = logging.getLogger("sigilforge")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(
        RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
    )
