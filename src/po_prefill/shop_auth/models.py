"""Typed records used by the shop OAuth flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Literal

from po_prefill.shop_auth.clock import Clock, default_clock

# Pending authorization requests go stale after 10 minutes by default
DEFAULT_AUTH_REQUEST_TTL: Final[int] = 600

CredentialSource = Literal["oauth", "admin"]


@dataclass(frozen=True, slots=True)
class AuthRequest:
    """Metadata captured when redirecting a merchant to the authorize page."""

    shop: str
    nonce: str
    created_at: int = field(default_factory=lambda: int(default_clock()))
    ttl_seconds: int = DEFAULT_AUTH_REQUEST_TTL

    def is_expired(self, *, clock: Clock = default_clock) -> bool:
        """Return *True* if the request exceeded its TTL."""
        return (clock() - self.created_at) > self.ttl_seconds


@dataclass(frozen=True, slots=True)
class Credential:
    """Access token bound to exactly one shop."""

    shop: str
    access_token: str
    scope: str | None = None
    obtained_at: int = field(default_factory=lambda: int(default_clock()))
    source: CredentialSource = "oauth"

    def __repr__(self) -> str:
        return (
            f"Credential(shop={self.shop!r}, scope={self.scope!r}, "
            f"source={self.source!r}, access_token='****')"
        )


@dataclass(slots=True)
class AuthSession:
    """Per-browser auth state, stored and expired by the caller.

    ``auth_request`` is the pending handshake (if any) and ``credential`` the
    token obtained by the last successful handshake.
    """

    auth_request: AuthRequest | None = None
    credential: Credential | None = None

    def take_auth_request(self) -> AuthRequest | None:
        """Return the pending request and clear it so it cannot be reused."""
        request, self.auth_request = self.auth_request, None
        return request
