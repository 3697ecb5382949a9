"""Logging setup. The screen belongs to the UI, so logs only ever go to a file."""

from __future__ import annotations

import logging
import os

DEBUG_ENV = "DEBUG"
LOG_FILE = "debug.log"


def debug_requested(flag: bool = False) -> bool:
    return flag or DEBUG_ENV in os.environ


def configure_logging(debug: bool = False, path: str = LOG_FILE) -> logging.Logger:
    """Send package logs to ``path`` when debugging, otherwise drop them."""
    logger = logging.getLogger("ctui_core")

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    if debug_requested(debug):
        handler: logging.Handler = logging.FileHandler(path)
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"))
        logger.setLevel(logging.DEBUG)
    else:
        handler = logging.NullHandler()
    logger.addHandler(handler)
    logger.propagate = False
    return logger
