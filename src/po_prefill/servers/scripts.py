"""Script tag endpoints and the injected script itself.

``/install-script`` and ``/view-scripts`` need a credential: the session's
OAuth token or, failing that, the configured admin token.  Without either the
browser is redirected into the OAuth flow.
"""

from __future__ import annotations

import logging
from html import escape

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from po_prefill.config import SCRIPT_FILENAME
from po_prefill.servers.correlation import correlation_id_of
from po_prefill.servers.dependencies import (
    auth_redirect,
    get_app_context,
    load_session,
    resolve_credential,
    wants_json,
)
from po_prefill.servers.pages import error_page, html_page, script_tag_list
from po_prefill.shop_auth.errors import AuthRequiredError, UpstreamError

_LOG = logging.getLogger("po-prefill.scripts.routes")


def _upstream_failure(request: Request, action: str, exc: UpstreamError) -> Response:
    _LOG.error(
        "Error %s: %s correlation_id=%s", action, exc, correlation_id_of(request) or "-"
    )
    if wants_json(request):
        return JSONResponse(exc.to_payload(), status_code=500)
    return error_page("Upstream error", f"Error {action}: {exc}", 500)


async def install_script(request: Request) -> Response:
    ctx = get_app_context(request)
    _, session = load_session(request)
    try:
        credential = resolve_credential(ctx, session)
    except AuthRequiredError as exc:
        return auth_redirect(exc)

    try:
        tag = await run_in_threadpool(
            ctx.reconciler.reconcile,
            credential,
            ctx.config.script_url,
            "onload",
            match=SCRIPT_FILENAME,
            display_scope=ctx.config.script_display_scope,
            correlation_id=correlation_id_of(request),
        )
    except UpstreamError as exc:
        return _upstream_failure(request, "installing script tag", exc)

    if wants_json(request):
        return JSONResponse({"script_tag": tag.to_dict()})
    return html_page(
        "Script Tag Installed Successfully",
        "<p>The PO Number Prefill script has been installed on your store.</p>"
        f"<p>Script URL: {escape(tag.src)}</p>"
        "<p>It will be loaded on all pages, including checkout.</p>"
        "<a href='/view-scripts'>View installed scripts</a>",
    )


async def manually_install(request: Request) -> Response:
    ctx = get_app_context(request)
    _, session = load_session(request)
    try:
        credential = resolve_credential(ctx, session)
    except AuthRequiredError as exc:
        return auth_redirect(exc)

    try:
        tag = await run_in_threadpool(
            ctx.reconciler.create_resource,
            credential,
            ctx.config.script_url,
            "onload",
            display_scope=ctx.config.script_display_scope or "online_store",
        )
    except UpstreamError as exc:
        return _upstream_failure(request, "creating script tag", exc)
    return JSONResponse({"script_tag": tag.to_dict()})


async def view_scripts(request: Request) -> Response:
    ctx = get_app_context(request)
    _, session = load_session(request)
    try:
        credential = resolve_credential(ctx, session)
    except AuthRequiredError as exc:
        return auth_redirect(exc)

    try:
        tags = await run_in_threadpool(ctx.reconciler.list_resources, credential)
    except UpstreamError as exc:
        return _upstream_failure(request, "fetching script tags", exc)

    if wants_json(request):
        return JSONResponse({"script_tags": [tag.to_dict() for tag in tags]})
    return html_page(
        "Installed Script Tags",
        script_tag_list(tags) + "<a href='/'>Home</a>",
    )


async def prefill_script(request: Request) -> Response:
    ctx = get_app_context(request)
    return Response(
        ctx.prefill_script,
        media_type="application/javascript",
        headers={"Cache-Control": "public, max-age=300"},
    )


def script_routes() -> list[Route]:
    return [
        Route("/install-script", install_script, methods=["GET"]),
        Route("/manually-install", manually_install, methods=["GET"]),
        Route("/view-scripts", view_scripts, methods=["GET"]),
        Route(f"/{SCRIPT_FILENAME}", prefill_script, methods=["GET"]),
    ]
