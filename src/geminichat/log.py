"""Logging setup for geminichat.

Modules log through ``logging.getLogger(__name__)`` so every record lands
under the ``geminichat`` logger. The CLI calls :func:`configure_logging`
once at startup.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "geminichat"

logger = logging.getLogger(LOGGER_NAME)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(level: str | int) -> int:
    """Convert a level name such as ``"info"`` to its numeric value.

    Unknown names fall back to WARNING.
    """
    if isinstance(level, int):
        return level
    return _LEVELS.get(level.strip().lower(), logging.WARNING)


def configure_logging(level: str | int = "warning", console: Console | None = None) -> None:
    """Route geminichat log records to a Rich handler on stderr.

    Calling this again replaces the previously installed handler instead of
    stacking a second one.
    """
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(parse_level(level))
