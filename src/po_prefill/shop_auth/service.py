"""ShopAuthService – authorization-code handshake with the commerce platform.

Handlers in ``po_prefill.servers.auth`` call the two façade methods below:

* :meth:`ShopAuthService.begin_auth` stores a pending :class:`AuthRequest` in
  the caller's :class:`AuthSession` and returns the authorize URL.
* :meth:`ShopAuthService.complete_auth` validates the signed callback and
  exchanges the authorization code for an access token.

The session is passed in explicitly; storing and expiring it is the caller's
job.  **All secrets are redacted** from logs.
"""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING, Any, Mapping
from urllib.parse import urlencode

import requests

from po_prefill.shop_auth.clock import Clock, default_clock
from po_prefill.shop_auth.errors import UpstreamError, ValidationError
from po_prefill.shop_auth.log_utils import get_auth_logger
from po_prefill.shop_auth.models import AuthRequest, AuthSession, Credential
from po_prefill.shop_auth.signature import generate_nonce, is_shop_domain, verify_signature
from po_prefill.utils.logging import mask_sensitive

if TYPE_CHECKING:  # pragma: no cover
    from po_prefill.config import AppConfig

_LOG = logging.getLogger("po-prefill.shop_auth.service")


class ShopAuthService:
    """Application service orchestrating the shop OAuth web-flow."""

    def __init__(self, config: AppConfig, *, clock: Clock = default_clock) -> None:
        self.config = config
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Public API called by HTTP handlers                                 #
    # ------------------------------------------------------------------ #
    def begin_auth(
        self,
        session: AuthSession,
        shop: str | None,
        *,
        correlation_id: str | None = None,
    ) -> str:
        """Record a pending request in *session* and return the authorize URL."""
        shop = (shop or "").strip().lower()
        if not shop:
            raise ValidationError("Missing shop parameter", reason="missing")
        if not is_shop_domain(shop):
            raise ValidationError("Invalid shop domain", reason="shop_domain")
        if not self.config.oauth_enabled:
            raise ValueError("OAuth client credentials are not configured")

        request = AuthRequest(
            shop=shop,
            nonce=generate_nonce(),
            created_at=int(self._clock()),
            ttl_seconds=self.config.auth_request_ttl,
        )
        session.auth_request = request

        query = urlencode(
            {
                "client_id": self.config.api_key,
                "scope": self.config.scopes,
                "redirect_uri": self.config.redirect_uri,
                "state": request.nonce,
            }
        )
        url = f"https://{shop}/admin/oauth/authorize?{query}"

        get_auth_logger(shop=shop, correlation_id=correlation_id).debug(
            "Built authorize URL state=%s", mask_sensitive(request.nonce, 6)
        )
        return url

    def complete_auth(
        self,
        session: AuthSession,
        query: Mapping[str, str],
        *,
        correlation_id: str | None = None,
    ) -> Credential:
        """Validate the callback *query* and exchange its code for a credential.

        The pending request is consumed before any check runs, so a replayed
        callback always fails the state check.

        Raises:
            ValidationError: shop, state, signature or expiry check failed.
            UpstreamError: the token exchange failed.
        """
        shop = query.get("shop", "")
        log = get_auth_logger(shop=shop or None, correlation_id=correlation_id)

        request = session.take_auth_request()
        if request is None:
            log.warning("Callback without a pending authorization request")
            raise ValidationError("Request origin cannot be verified", reason="state")
        if request.is_expired(clock=self._clock):
            log.warning("Authorization request expired")
            raise ValidationError("Authorization request expired", reason="expired")

        if shop != request.shop:
            log.warning("Callback shop does not match pending request")
            raise ValidationError("Shop does not match", reason="shop")

        state = query.get("state", "")
        if not hmac.compare_digest(state.encode("utf-8"), request.nonce.encode("utf-8")):
            log.warning("Callback state does not match nonce")
            raise ValidationError("Request origin cannot be verified", reason="state")

        if not verify_signature(query, self.config.api_secret or ""):
            log.warning("Callback HMAC validation failed")
            raise ValidationError("HMAC validation failed", reason="hmac")

        code = query.get("code")
        if not code:
            raise ValidationError("Missing authorization code", reason="missing")

        credential = self._exchange_code(shop, code)
        session.credential = credential
        log.info("Exchanged OAuth code (scope=%s)", credential.scope or "-")
        return credential

    def admin_credential(self) -> Credential | None:
        """Return the static admin-token credential, if configured."""
        if not self.config.admin_token_enabled:
            return None
        return Credential(
            shop=self.config.shop or "",
            access_token=self.config.admin_api_access_token or "",
            scope=None,
            obtained_at=int(self._clock()),
            source="admin",
        )

    # ---------------- internal helpers --------------------------------- #
    def _exchange_code(self, shop: str, code: str) -> Credential:
        url = f"https://{shop}/admin/oauth/access_token"
        payload: dict[str, str] = {
            "client_id": self.config.api_key or "",
            "client_secret": self.config.api_secret or "",  # noqa: S105
            "code": code,
        }
        try:
            resp = requests.post(url, json=payload, timeout=self.config.http_timeout)
        except requests.Timeout as exc:
            raise UpstreamError(f"Token request timed out: {exc}", url=url) from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"Token request failed: {exc}", url=url) from exc

        if not resp.ok:
            raise UpstreamError(
                f"Token endpoint returned {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
                url=url,
            )

        try:
            data: Any = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                "Token endpoint returned a non-JSON body",
                status_code=resp.status_code,
                url=url,
            ) from exc

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise UpstreamError(
                "Token response missing access_token",
                status_code=resp.status_code,
                url=url,
            )

        _LOG.debug("Obtained access token %s", mask_sensitive(access_token, 4))
        return Credential(
            shop=shop,
            access_token=access_token,
            scope=data.get("scope"),
            obtained_at=int(self._clock()),
            source="oauth",
        )
