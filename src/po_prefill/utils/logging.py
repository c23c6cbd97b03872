"""Logging helpers shared by the HTTP layer, services and scripts."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Return *value* with everything but the first *keep_chars* masked."""
    if not value:
        return ""
    if len(value) <= keep_chars * 2:
        return "*" * len(value)
    return value[:keep_chars] + "*" * (len(value) - keep_chars)


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Configure the ``po-prefill`` logger hierarchy to write to stderr.

    Returns the package root logger.  Calling this more than once replaces the
    previously installed handler instead of stacking duplicates.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("po-prefill")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
