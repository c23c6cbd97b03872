"""Callback signature and nonce helpers for the shop OAuth flow.

The platform signs every callback it sends to ``/auth/callback``.  The
signature covers all query parameters except ``hmac`` itself:

1. drop the ``hmac`` parameter
2. sort the remaining parameters lexicographically by key
3. join them as ``key=value`` pairs with ``&`` (values are **not** re-encoded)
4. HMAC-SHA256 the message with the app's client secret, hex encode

Comparison against the supplied value uses :pyfunc:`hmac.compare_digest`.

This module performs **no logging** of secrets, nonces or digests.
"""

from __future__ import annotations

import hmac
import re
import secrets
from hashlib import sha256
from typing import Final, Mapping

SIGNATURE_PARAM: Final[str] = "hmac"

# 16 bytes of entropy -> 32 hex characters
_NONCE_BYTES: Final[int] = 16

_HOST_LABEL_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


def build_message(params: Mapping[str, str]) -> str:
    """Return the canonical message signed by the platform."""
    return "&".join(
        f"{key}={value}"
        for key, value in sorted(params.items())
        if key != SIGNATURE_PARAM
    )


def compute_signature(params: Mapping[str, str], secret: str) -> str:
    """Compute the hex HMAC-SHA256 signature over *params*.

    Parameters
    ----------
    params:
        Callback query parameters.  An ``hmac`` entry, if present, is ignored.
    secret:
        Shared client secret.

    Returns
    -------
    str
        Lower-case hex digest.
    """
    message = build_message(params)
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), sha256).hexdigest()


def verify_signature(params: Mapping[str, str], secret: str) -> bool:
    """Return *True* when ``params["hmac"]`` matches the recomputed signature."""
    supplied = params.get(SIGNATURE_PARAM)
    if not supplied or not secret:
        return False
    expected = compute_signature(params, secret)
    # bytes, so non-ASCII input compares unequal instead of raising
    return hmac.compare_digest(expected.encode("ascii"), supplied.encode("utf-8"))


def generate_nonce(nbytes: int = _NONCE_BYTES) -> str:
    """Return a hex-encoded random nonce with at least 16 bytes of entropy."""
    if nbytes < _NONCE_BYTES:
        raise ValueError(f"nonce must carry at least {_NONCE_BYTES} bytes of entropy")
    return secrets.token_hex(nbytes)


def is_shop_domain(shop: str | None) -> bool:
    """Return *True* if *shop* is syntactically a host name with 2+ labels."""
    if not shop or len(shop) > 253:
        return False
    labels = shop.lower().split(".")
    if len(labels) < 2:
        return False
    return all(_HOST_LABEL_RE.match(label) for label in labels)
