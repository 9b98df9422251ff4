"""Logging helpers that avoid heavy dependencies."""

from __future__ import annotations

import logging
from typing import TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_logger(name: str = "wp_starter", *, verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Return a logger writing to `stream` (stderr by default); DEBUG when verbose."""

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream)
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False
    return logger
