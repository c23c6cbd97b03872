"""Starlette application setup for the PO Number Prefill integration."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from po_prefill.config import AppConfig
from po_prefill.prefill_script import render_prefill_script
from po_prefill.script_tags.client import ScriptTagApi, ScriptTagClient
from po_prefill.script_tags.reconciler import ScriptTagReconciler
from po_prefill.servers.auth import auth_routes
from po_prefill.servers.context import AppContext
from po_prefill.servers.correlation import CorrelationIdMiddleware
from po_prefill.servers.pages import home, success
from po_prefill.servers.scripts import script_routes
from po_prefill.shop_auth.clock import Clock, default_clock
from po_prefill.shop_auth.service import ShopAuthService
from po_prefill.shop_auth.store import MemorySessionStore, SessionStore

logger = logging.getLogger("po-prefill.server.main")


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@asynccontextmanager
async def main_lifespan(app: Starlette) -> AsyncIterator[None]:
    ctx: AppContext = app.state.ctx
    logger.info("PO Number Prefill app starting (host=%s)", ctx.config.host)
    logger.info(
        "OAuth flow: %s, admin token: %s",
        "ENABLED" if ctx.config.oauth_enabled else "DISABLED",
        "ENABLED" if ctx.config.admin_token_enabled else "DISABLED",
    )
    try:
        yield
    finally:
        logger.info("PO Number Prefill app shutdown complete.")


def build_context(
    config: AppConfig,
    *,
    api: ScriptTagApi | None = None,
    sessions: SessionStore | None = None,
    clock: Clock = default_clock,
) -> AppContext:
    """Wire the services for *config*; *api* and *sessions* are injectable."""
    api = api or ScriptTagClient(api_version=config.api_version, timeout=config.http_timeout)
    return AppContext(
        config=config,
        auth_service=ShopAuthService(config, clock=clock),
        reconciler=ScriptTagReconciler(api),
        sessions=sessions or MemorySessionStore(ttl_seconds=config.session_ttl, clock=clock),
        prefill_script=render_prefill_script(field_selector=config.field_selector),
    )


def create_app(config: AppConfig, *, context: AppContext | None = None) -> Starlette:
    """Return the ASGI application for *config*."""
    ctx = context or build_context(config)
    routes = [
        Route("/", home, methods=["GET"]),
        Route("/success", success, methods=["GET"]),
        Route("/healthz", health_check, methods=["GET"]),
        *auth_routes(),
        *script_routes(),
    ]
    app = Starlette(
        routes=routes,
        middleware=[Middleware(CorrelationIdMiddleware)],
        lifespan=main_lifespan,
    )
    app.state.ctx = ctx
    return app
