"""Process-wide logger configured once from settings."""

from __future__ import annotations

import logging
import sys
from typing import Optional

_logger: Optional[logging.Logger] = None


def initialize(debug: bool) -> logging.Logger:
    """Configure the logger on first call; later calls keep the first setup."""
    global _logger
    if _logger is None:
        logger = logging.getLogger("hubble")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            "time=%(asctime)s level=%(levelname)s msg=%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(logging.DEBUG if debug else logging.INFO)
        _logger = logger
    return _logger


def get_logger() -> logging.Logger:
    """Return the configured logger."""
    if _logger is None:
        raise RuntimeError("logger is not initialized")
    return _logger