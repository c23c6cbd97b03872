"""Tiny HTML pages for the merchant-facing routes."""

from __future__ import annotations

from html import escape
from typing import Iterable

from starlette.requests import Request
from starlette.responses import HTMLResponse, Response

from po_prefill.script_tags.models import ScriptTag
from po_prefill.servers.dependencies import get_app_context


def html_page(title: str, body: str, status: int = 200) -> HTMLResponse:
    """Return a tiny HTML page; *body* must already be escaped."""
    content = (
        "<!doctype html><html lang='en'>"
        "<head><meta charset='utf-8'><title>"
        f"{escape(title)}</title></head><body><h1>{escape(title)}</h1>{body}</body></html>"
    )
    return HTMLResponse(content, status_code=status)


def error_page(title: str, message: str, status: int) -> HTMLResponse:
    return html_page(title, f"<p>{escape(message)}</p>", status)


def script_tag_list(tags: Iterable[ScriptTag]) -> str:
    items = "".join(
        f"<li>ID: {tag.id} - Source: {escape(tag.src)} - Event: {escape(tag.event)}</li>"
        for tag in tags
    )
    return f"<ul>{items}</ul>"


async def home(request: Request) -> Response:
    ctx = get_app_context(request)
    links = []
    if ctx.config.oauth_enabled:
        auth_href = f"/auth?shop={escape(ctx.config.shop)}" if ctx.config.shop else "/auth"
        links.append(f"<a href='{auth_href}'>Authenticate with the store</a>")
    links.append("<a href='/install-script'>Install Script Tag</a>")
    links.append("<a href='/view-scripts'>View Installed Scripts</a>")
    return html_page(
        "PO Number Prefill App",
        "<p>Automatically prefill the PO Number field at checkout from the cart note.</p>"
        + "<br><br>".join(links),
    )


async def success(request: Request) -> Response:
    return html_page(
        "Authentication successful!",
        "<p>You can now install the PO Number Prefill script.</p>"
        "<a href='/install-script'>Click here to install the script</a>",
    )
