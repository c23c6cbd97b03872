"""Request-scoped helpers: app context, session cookie and credential lookup."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from po_prefill.servers.context import AppContext
from po_prefill.shop_auth.errors import AuthRequiredError
from po_prefill.shop_auth.models import AuthSession, Credential

logger = logging.getLogger("po-prefill.servers.dependencies")

SESSION_COOKIE = "po_prefill_sid"


def get_app_context(request: Request) -> AppContext:
    return request.app.state.ctx


def load_session(request: Request) -> tuple[str, AuthSession]:
    """Return ``(session_id, session)`` for the request, creating one if needed."""
    ctx = get_app_context(request)
    session_id = request.cookies.get(SESSION_COOKIE)
    session = ctx.sessions.get(session_id)
    if session_id and session is not None:
        return session_id, session
    return ctx.sessions.new_session_id(), AuthSession()


def commit_session(
    request: Request, response: Response, session_id: str, session: AuthSession
) -> Response:
    """Persist *session* and (re)issue the cookie on *response*."""
    ctx = get_app_context(request)
    ctx.sessions.save(session_id, session)
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=ctx.config.session_ttl,
        httponly=True,
        samesite="lax",
        secure=ctx.config.host.startswith("https://"),
    )
    return response


def resolve_credential(ctx: AppContext, session: AuthSession) -> Credential:
    """Return the session's OAuth credential, else the admin-token credential.

    Raises:
        AuthRequiredError: Neither is available.
    """
    if session.credential is not None:
        return session.credential
    admin = ctx.auth_service.admin_credential()
    if admin is not None:
        logger.debug("Using admin API token for shop=%s", admin.shop)
        return admin
    raise AuthRequiredError(shop=ctx.config.shop)


def auth_redirect(exc: AuthRequiredError, *, base_path: str = "/auth") -> RedirectResponse:
    """Send the browser to the start of the OAuth flow."""
    url = f"{base_path}?{urlencode({'shop': exc.shop})}" if exc.shop else base_path
    return RedirectResponse(url, status_code=302)


def wants_json(request: Request) -> bool:
    """``format=json`` wins; otherwise JSON when the client does not accept HTML."""
    fmt = request.query_params.get("format")
    if fmt:
        return fmt == "json"
    accept = (request.headers.get("accept") or "").lower()
    return "application/json" in accept and "text/html" not in accept
