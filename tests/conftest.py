"""Shared fixtures: config, a fake in-memory platform and callback signing."""

from __future__ import annotations

from typing import Callable

import pytest

from po_prefill.config import AppConfig
from po_prefill.shop_auth.models import Credential
from po_prefill.shop_auth.signature import compute_signature
from tests.fakes import TEST_API_KEY, TEST_API_SECRET, TEST_HOST, TEST_SHOP, FakeScriptTagApi


@pytest.fixture()
def config() -> AppConfig:
    return AppConfig(
        host=TEST_HOST,
        shop=TEST_SHOP,
        api_key=TEST_API_KEY,
        api_secret=TEST_API_SECRET,
        http_timeout=10.0,
    )


@pytest.fixture()
def credential() -> Credential:
    return Credential(shop=TEST_SHOP, access_token="shpat_test_token", scope="write_script_tags")


@pytest.fixture()
def fake_api() -> FakeScriptTagApi:
    return FakeScriptTagApi()


@pytest.fixture()
def sign_callback() -> Callable[[dict[str, str]], dict[str, str]]:
    """Return a helper adding a valid ``hmac`` to callback params."""

    def _sign(params: dict[str, str], secret: str = TEST_API_SECRET) -> dict[str, str]:
        signed = dict(params)
        signed["hmac"] = compute_signature(params, secret)
        return signed

    return _sign


def pytest_addoption(parser):
    """Add integration option to pytest."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )
