"""Exception types raised by the shop authentication and script-tag logic.

Only lightweight, **data-carrying** exceptions live here so that web/CLI layers
can transform them into HTTP responses or user-friendly messages.
"""

from __future__ import annotations

from typing import Any, Literal

ValidationReason = Literal["shop", "state", "hmac", "expired", "missing", "shop_domain"]


class PrefillError(RuntimeError):
    """Base class for errors surfaced by the prefill integration."""

    error_code: str = "prefill_error"

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable payload **without secrets**."""
        return {"error": self.error_code, "message": str(self)}


class ValidationError(PrefillError):
    """Raised when user-supplied input (shop, nonce, signature) is rejected."""

    error_code = "validation_failed"

    def __init__(self, message: str, *, reason: ValidationReason) -> None:
        super().__init__(message)
        self.reason: ValidationReason = reason

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["reason"] = self.reason
        return payload


class UpstreamError(PrefillError):
    """Raised on network failure or a non-2xx/malformed platform response."""

    error_code = "upstream_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code: int | None = status_code
        self.url: str | None = url

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status_code"] = self.status_code
        return payload


class AuthRequiredError(PrefillError):
    """Raised when no credential is available and the OAuth flow must run."""

    error_code = "auth_required"

    def __init__(self, *, shop: str | None = None, message: str | None = None) -> None:
        super().__init__(message or "Authentication required.")
        self.shop: str | None = shop
