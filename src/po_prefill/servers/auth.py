"""Browser-based OAuth endpoints.

Handlers are intentionally thin:

1. Parse HTTP-layer parameters and load the caller's session.
2. Delegate business logic to ``ShopAuthService``.
3. Return an appropriate Starlette ``Response`` type.

SECURITY NOTE
-------------
No raw secrets (nonces, HMACs, access tokens, client secrets) are ever
logged.  Correlation IDs are included in INFO logs to aid troubleshooting.
"""

from __future__ import annotations

import logging

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.routing import Route

from po_prefill.servers.correlation import correlation_id_of
from po_prefill.servers.dependencies import commit_session, get_app_context, load_session
from po_prefill.servers.pages import error_page
from po_prefill.shop_auth.errors import UpstreamError, ValidationError

_LOG = logging.getLogger("po-prefill.auth.routes")


def auth_routes(*, base_path: str = "/auth", success_path: str = "/success") -> list[Route]:
    """Return the OAuth routes mounted under *base_path*."""

    # ----- GET /auth?shop=<domain> ---------------------------------------- #
    async def _start(request: Request) -> Response:
        ctx = get_app_context(request)
        shop = request.query_params.get("shop") or ctx.config.shop
        if not shop:
            return error_page("Missing parameters", "Missing shop parameter", 400)

        session_id, session = load_session(request)
        try:
            authorize_url = ctx.auth_service.begin_auth(
                session, shop, correlation_id=correlation_id_of(request)
            )
        except ValidationError as exc:
            return error_page("Invalid request", str(exc), 400)
        except ValueError as exc:
            return error_page("OAuth not configured", str(exc), 400)

        _LOG.info(
            "OAuth start shop=%s correlation_id=%s",
            shop,
            correlation_id_of(request) or "-",
        )
        response = RedirectResponse(authorize_url, status_code=302)
        return commit_session(request, response, session_id, session)

    # ----- GET /auth/callback --------------------------------------------- #
    async def _callback(request: Request) -> Response:
        ctx = get_app_context(request)
        # Provider-side errors first (e.g. access_denied)
        oauth_error = request.query_params.get("error")
        if oauth_error:
            description = request.query_params.get("error_description", "")
            return error_page(
                "Authorization error",
                f"{oauth_error}: {description}" if description else oauth_error,
                400,
            )

        session_id, session = load_session(request)
        query = dict(request.query_params)
        try:
            credential = await run_in_threadpool(
                ctx.auth_service.complete_auth,
                session,
                query,
                correlation_id=correlation_id_of(request),
            )
        except ValidationError as exc:
            _LOG.warning("OAuth callback rejected (%s): %s", exc.reason, exc)
            response = error_page("Authorization failed", str(exc), 400)
            return commit_session(request, response, session_id, session)
        except UpstreamError as exc:
            _LOG.error("Error getting access token: %s", exc)
            response = error_page("Authorization failed", "Error getting access token", 500)
            return commit_session(request, response, session_id, session)

        _LOG.info(
            "OAuth success shop=%s correlation_id=%s",
            credential.shop,
            correlation_id_of(request) or "-",
        )
        response = RedirectResponse(success_path, status_code=302)
        return commit_session(request, response, session_id, session)

    return [
        Route(base_path, _start, methods=["GET"]),
        Route(f"{base_path}/callback", _callback, methods=["GET"]),
    ]
