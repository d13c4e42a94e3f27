from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "subruby"


class _SubrubyRichHandler(RichHandler):
    """RichHandler tagged so repeated setup calls can find and replace it."""


def set_debug_logging(enabled: bool, console: Console | None = None) -> None:
    """Route subruby's debug messages to stderr through rich, or silence them."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, _SubrubyRichHandler):
            logger.removeHandler(handler)
    if not enabled:
        logger.setLevel(logging.NOTSET)
        return
    handler = _SubrubyRichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
