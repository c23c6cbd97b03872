"""End-to-end install flow against an in-memory platform.

The real ``ScriptTagClient`` talks to ``FakePlatform`` through its session
seam, and the OAuth code exchange goes through a patched ``requests.post``,
so every layer from route to wire payload runs without a network.
"""

from __future__ import annotations

import re
from typing import Any, Callable
from urllib.parse import parse_qs, urlencode, urlparse

import httpx
import pytest
import requests

from po_prefill.config import AppConfig
from po_prefill.script_tags.client import ACCESS_TOKEN_HEADER, ScriptTagClient
from po_prefill.servers import build_context, create_app
from tests.fakes import TEST_HOST, TEST_SHOP

pytestmark = [pytest.mark.integration, pytest.mark.ci_safe, pytest.mark.anyio]

OAUTH_TOKEN = "shpat_oauth_token"
ADMIN_TOKEN = "shpat_admin_token"
SCRIPT_URL = f"{TEST_HOST}/po-number-prefill.js"
_TAG_PATH = re.compile(r"/admin/api/[^/]+/script_tags(?:/(\d+))?\.json$")


class _Resp:
    def __init__(self, status: int, payload: Any = None) -> None:
        self.status_code = status
        self.ok = 200 <= status < 300
        self._payload = payload
        self.content = b"" if payload is None else b"{...}"
        self.text = "" if payload is None else repr(payload)

    def json(self) -> Any:
        return self._payload


class FakePlatform:
    """Single-shop script tag store speaking the admin REST shapes."""

    def __init__(self, tokens: set[str]) -> None:
        self.tokens = tokens
        self.tags: list[dict[str, Any]] = []
        self.methods: list[str] = []
        self._next_id = 500

    def seed(self, src: str, event: str = "onload") -> int:
        self._next_id += 1
        self.tags.append({"id": self._next_id, "src": src, "event": event})
        return self._next_id

    def request(self, method: str, url: str, *, headers, json=None, timeout=None):  # noqa: A002, ANN001
        parsed = urlparse(url)
        match = _TAG_PATH.match(parsed.path)
        if parsed.netloc != TEST_SHOP or match is None:
            return _Resp(404, {"errors": "Not Found"})
        if headers.get(ACCESS_TOKEN_HEADER) not in self.tokens:
            return _Resp(401, {"errors": "Invalid API key or access token"})
        self.methods.append(method)

        if method == "GET":
            return _Resp(200, {"script_tags": list(self.tags)})
        if method == "POST":
            body = dict(json["script_tag"])
            body["id"] = self.seed(body["src"], body["event"])
            self.tags[-1] = body
            return _Resp(201, {"script_tag": body})
        if method == "DELETE":
            tag_id = int(match.group(1))
            self.tags = [t for t in self.tags if t["id"] != tag_id]
            return _Resp(200, {})
        return _Resp(405, {"errors": "Method Not Allowed"})

    def token_endpoint(self, url: str, *, json: dict, timeout: float) -> _Resp:  # noqa: A002
        assert url == f"https://{TEST_SHOP}/admin/oauth/access_token"
        if json.get("code") != "good-code":
            return _Resp(400, {"error": "invalid_request"})
        return _Resp(200, {"access_token": OAUTH_TOKEN, "scope": "write_script_tags"})

    def srcs(self) -> list[str]:
        return [t["src"] for t in self.tags]


def _app_client(config: AppConfig, platform: FakePlatform) -> httpx.AsyncClient:
    api = ScriptTagClient(api_version=config.api_version, session=platform)  # type: ignore[arg-type]
    app = create_app(config, context=build_context(config, api=api))
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="https://testserver"
    )


@pytest.fixture()
def platform(monkeypatch: pytest.MonkeyPatch) -> FakePlatform:
    fake = FakePlatform({OAUTH_TOKEN, ADMIN_TOKEN})
    monkeypatch.setattr(requests, "post", fake.token_endpoint, raising=True)
    return fake


async def _authenticate(client: httpx.AsyncClient, sign: Callable[..., dict[str, str]]) -> None:
    start = await client.get("/auth", params={"shop": TEST_SHOP})
    state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]
    params = sign({"code": "good-code", "shop": TEST_SHOP, "state": state, "timestamp": "1"})
    callback = await client.get("/auth/callback?" + urlencode(params))
    assert callback.status_code == 302
    assert callback.headers["location"] == "/success"


async def test_oauth_then_install_on_empty_shop(
    config: AppConfig, platform: FakePlatform, sign_callback: Callable[..., dict[str, str]]
) -> None:
    async with _app_client(config, platform) as client:
        await _authenticate(client, sign_callback)
        resp = await client.get("/install-script", params={"format": "json"})

    assert resp.status_code == 200
    assert platform.methods == ["GET", "POST"]
    assert len(platform.tags) == 1
    assert platform.tags[0]["event"] == "onload"
    assert platform.tags[0]["src"].endswith("/po-number-prefill.js")


async def test_install_replaces_duplicates_and_keeps_others(
    config: AppConfig, platform: FakePlatform, sign_callback: Callable[..., dict[str, str]]
) -> None:
    other = "https://cdn.reviews.example/widget.js"
    platform.seed(SCRIPT_URL)
    platform.seed(other)
    platform.seed(SCRIPT_URL)

    async with _app_client(config, platform) as client:
        await _authenticate(client, sign_callback)
        resp = await client.get("/install-script", params={"format": "json"})
        listed = await client.get("/view-scripts", params={"format": "json"})

    assert resp.status_code == 200
    assert platform.methods[:4] == ["GET", "DELETE", "DELETE", "POST"]
    assert platform.srcs() == [other, SCRIPT_URL]
    assert [t["src"] for t in listed.json()["script_tags"]] == [other, SCRIPT_URL]


async def test_admin_token_install_is_repeatable(platform: FakePlatform) -> None:
    config = AppConfig(host=TEST_HOST, shop=TEST_SHOP, admin_api_access_token=ADMIN_TOKEN)

    async with _app_client(config, platform) as client:
        for _ in range(3):
            resp = await client.get("/install-script", params={"format": "json"})
            assert resp.status_code == 200

    assert platform.srcs() == [SCRIPT_URL]


async def test_rejected_token_surfaces_as_upstream_error(platform: FakePlatform) -> None:
    config = AppConfig(host=TEST_HOST, shop=TEST_SHOP, admin_api_access_token="revoked")

    async with _app_client(config, platform) as client:
        resp = await client.get("/install-script", params={"format": "json"})

    assert resp.status_code == 500
    assert resp.json()["status_code"] == 401
    assert platform.tags == []
