"""Structured logging helpers for the shop OAuth and script-tag components.

This module restricts **which** contextual attributes are attached to log
records so that secrets never leak.  Only the following *non-sensitive* fields
are injected:

- ``shop``           – Shop domain the operation targets
- ``correlation_id`` – Per-request identifier set by the HTTP middleware
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping


class _AuthLoggerAdapter(logging.LoggerAdapter):
    """Inject whitelisted auth context into log records."""

    extra_keys = ("shop", "correlation_id")

    def __init__(self, logger: logging.Logger, extra: Mapping[str, Any] | None = None):
        extra_clean: MutableMapping[str, Any] = {}
        for k in self.extra_keys:
            if extra and extra.get(k) is not None:
                extra_clean[k] = extra[k]
        super().__init__(logger, extra_clean)

    def process(self, msg: str, kwargs: MutableMapping[str, Any]):
        if "extra" not in kwargs or kwargs["extra"] is None:
            kwargs["extra"] = {}
        # merge but do not overwrite call-site provided extras
        for k, v in self.extra.items():
            kwargs["extra"].setdefault(k, v)
        return msg, kwargs


def get_auth_logger(
    *,
    base_logger_name: str = "po-prefill.shop_auth",
    shop: str | None = None,
    correlation_id: str | None = None,
) -> logging.LoggerAdapter:
    """Return a LoggerAdapter pre-filled with shop context."""
    logger = logging.getLogger(base_logger_name)
    return _AuthLoggerAdapter(
        logger,
        {"shop": shop, "correlation_id": correlation_id},
    )
