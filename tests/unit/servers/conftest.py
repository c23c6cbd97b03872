"""Fixtures binding an async HTTP client to the Starlette app."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import requests

from po_prefill.config import AppConfig
from po_prefill.servers import build_context, create_app
from tests.fakes import TEST_HOST, TEST_SHOP, FakeScriptTagApi

BASE_URL = "https://testserver"


def _client(config: AppConfig, api: FakeScriptTagApi) -> httpx.AsyncClient:
    app = create_app(config, context=build_context(config, api=api))
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL)


@pytest.fixture()
def admin_config() -> AppConfig:
    return AppConfig(host=TEST_HOST, shop=TEST_SHOP, admin_api_access_token="shpat_admin")


@pytest.fixture()
async def client(config: AppConfig, fake_api: FakeScriptTagApi):
    """Client for an app with OAuth configured and no admin token."""
    async with _client(config, fake_api) as ac:
        yield ac


@pytest.fixture()
async def admin_client(admin_config: AppConfig, fake_api: FakeScriptTagApi):
    """Client for an app running on the static admin token only."""
    async with _client(admin_config, fake_api) as ac:
        yield ac


@pytest.fixture()
def token_endpoint(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Patch requests.post so the code exchange succeeds without a network."""
    state: dict[str, Any] = {"calls": 0, "status": 200}

    class _Resp:
        def __init__(self, status: int) -> None:
            self.status_code = status
            self.ok = 200 <= status < 300
            self.text = "{}" if self.ok else "boom"

        def json(self) -> dict[str, str]:
            return {"access_token": "shpat_from_oauth", "scope": "write_script_tags"}

    def fake_post(url: str, *, json: dict, timeout: float) -> _Resp:  # noqa: A002
        state["calls"] += 1
        state["url"] = url
        return _Resp(state["status"])

    monkeypatch.setattr(requests, "post", fake_post, raising=True)
    return state
