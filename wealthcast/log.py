"""
Logging setup for wealthcast.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
application (CLI, service) calls ``configure_logging`` once to attach a
handler to the ``wealthcast`` logger at the configured level.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from .config import AppSettings
from .constants import LOG_FORMAT

__all__ = ["configure_logging"]

_HANDLER_NAME = "wealthcast-default"


def configure_logging(
    settings: Optional[AppSettings] = None,
    level: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Parameters
    ----------
    settings : AppSettings, optional
        Source of ``log_level`` (default: ``AppSettings()``).
    level : str, optional
        Overrides ``settings.log_level``.
    stream : TextIO, optional
        Destination (default: stderr).

    Calling it again replaces the previous handler instead of stacking a
    second one.

    Examples
    --------
    >>> logger = configure_logging(level="DEBUG")
    >>> logger.level == logging.DEBUG
    True
    """
    settings = settings or AppSettings()
    logger = logging.getLogger("wealthcast")
    logger.setLevel(level or settings.log_level)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
