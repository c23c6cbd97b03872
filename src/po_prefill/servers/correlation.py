"""Per-request ``X-Correlation-ID`` handling.

An incoming id is reused only when it is a short token of letters, digits,
``-`` and ``_``; anything else is replaced with a fresh UUID4 hex so that
caller-supplied text never reaches log lines verbatim.
"""

from __future__ import annotations

import logging
import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

CORRELATION_HEADER = "X-Correlation-ID"
_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_logger = logging.getLogger("po-prefill.correlation")


def _pick_correlation_id(incoming: str | None) -> str:
    if incoming and _SAFE_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = _pick_correlation_id(request.headers.get(self.header_name))
        request.state.correlation_id = correlation_id
        _logger.debug(
            "%s %s", request.method, request.url.path, extra={"correlation_id": correlation_id}
        )
        response = await call_next(request)
        response.headers[self.header_name] = correlation_id
        return response


def correlation_id_of(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)
