"""Payloads of the error taxonomy must carry context but never secrets."""

from __future__ import annotations

from po_prefill.shop_auth.errors import AuthRequiredError, UpstreamError, ValidationError


def test_validation_payload_carries_reason() -> None:
    assert ValidationError("HMAC validation failed", reason="hmac").to_payload() == {
        "error": "validation_failed",
        "message": "HMAC validation failed",
        "reason": "hmac",
    }


def test_upstream_payload_omits_url() -> None:
    exc = UpstreamError(
        "GET script_tags.json returned 401",
        status_code=401,
        url="https://test.myshop.example/admin/api/2023-01/script_tags.json",
    )
    payload = exc.to_payload()
    assert payload == {
        "error": "upstream_error",
        "message": "GET script_tags.json returned 401",
        "status_code": 401,
    }
    assert exc.url is not None


def test_auth_required_defaults() -> None:
    exc = AuthRequiredError(shop="test.myshop.example")
    assert exc.shop == "test.myshop.example"
    assert exc.to_payload() == {"error": "auth_required", "message": "Authentication required."}
