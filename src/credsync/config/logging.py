"""Root logger setup for the command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# request-per-line loggers of the HTTP stack
_CHATTY_LOGGERS = ("httpx", "httpcore", "hishel")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger via ``logging.basicConfig``.

    Below DEBUG verbosity the HTTP stack is held at WARNING so gateway
    warnings stay readable. ``force=True`` replaces existing handlers.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    quiet = logging.WARNING if level > logging.DEBUG else logging.NOTSET
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
