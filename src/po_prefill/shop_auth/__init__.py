"""Shop authentication core package.

This namespace hosts the **HTTP-agnostic** building blocks of the OAuth
handshake with the commerce platform.

Sub-modules
-----------
clock
    Test-friendly time abstraction.
signature
    Callback HMAC verification, nonce generation, shop-domain checks.
models
    Auth request, credential and per-browser session records.
errors
    Exception types used by the auth and script-tag logic.
service
    :class:`ShopAuthService` with ``begin_auth`` / ``complete_auth``.
store
    In-memory TTL storage for auth sessions.
log_utils
    Structured logging helpers (thin wrapper around :pymod:`logging`).

All public objects are re-exported here for convenience.
"""

from __future__ import annotations

from .clock import Clock, default_clock  # noqa: F401
from .errors import (  # noqa: F401
    AuthRequiredError,
    PrefillError,
    UpstreamError,
    ValidationError,
)
from .log_utils import get_auth_logger  # noqa: F401
from .models import AuthRequest, AuthSession, Credential  # noqa: F401
from .service import ShopAuthService  # noqa: F401
from .signature import compute_signature, generate_nonce, verify_signature  # noqa: F401
from .store import MemorySessionStore, SessionStore  # noqa: F401

__all__ = [
    # clock
    "Clock",
    "default_clock",
    # signature
    "compute_signature",
    "verify_signature",
    "generate_nonce",
    # models
    "AuthRequest",
    "AuthSession",
    "Credential",
    # errors
    "PrefillError",
    "ValidationError",
    "UpstreamError",
    "AuthRequiredError",
    # service
    "ShopAuthService",
    # store
    "SessionStore",
    "MemorySessionStore",
    # logging helpers
    "get_auth_logger",
]
