"""Environment-driven configuration for the PO Number Prefill app."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Final, Mapping

from po_prefill.shop_auth.models import DEFAULT_AUTH_REQUEST_TTL

logger = logging.getLogger("po-prefill.config")

SCRIPT_FILENAME: Final[str] = "po-number-prefill.js"
DEFAULT_SCOPES: Final[str] = "write_script_tags,read_orders"
DEFAULT_API_VERSION: Final[str] = "2023-01"
DEFAULT_FIELD_SELECTOR: Final[str] = 'input[name="poNumber"]'


class ConfigError(ValueError):
    """Raised when required environment variables are missing."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "Missing required environment variables: " + ", ".join(missing)
        )
        self.missing = missing


def _get(env: Mapping[str, str], key: str, default: str | None = None) -> str | None:
    value = env.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = _get(env, key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", key, raw, default)
        return default


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = _get(env, key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", key, raw, default)
        return default


@dataclass(frozen=True)
class AppConfig:
    """Settings for the OAuth flow, the Admin API and the injected script."""

    host: str
    shop: str | None = None
    api_key: str | None = None
    api_secret: str | None = None
    scopes: str = DEFAULT_SCOPES
    admin_api_access_token: str | None = None
    api_version: str = DEFAULT_API_VERSION
    script_display_scope: str | None = None
    field_selector: str = DEFAULT_FIELD_SELECTOR
    auth_request_ttl: int = DEFAULT_AUTH_REQUEST_TTL
    session_ttl: int = 86400
    http_timeout: float = 10.0
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "AppConfig":
        """Build the configuration from *env* (defaults to ``os.environ``).

        Only presence is validated: ``HOST`` is always required, plus either
        the OAuth client pair or an admin token together with ``SHOP``.

        Raises:
            ConfigError: If required variables are missing.
        """
        env = os.environ if env is None else env

        host = _get(env, "HOST")
        shop = _get(env, "SHOP")
        api_key = _get(env, "SHOPIFY_API_KEY")
        api_secret = _get(env, "SHOPIFY_API_SECRET")
        admin_token = _get(env, "ADMIN_API_ACCESS_TOKEN")

        missing: list[str] = []
        if not host:
            missing.append("HOST")
        has_oauth = bool(api_key and api_secret)
        has_admin = bool(admin_token and shop)
        if not has_oauth and not has_admin:
            if admin_token:
                missing.append("SHOP")
            else:
                if not api_key:
                    missing.append("SHOPIFY_API_KEY")
                if not api_secret:
                    missing.append("SHOPIFY_API_SECRET")
        if missing:
            raise ConfigError(missing)

        config = cls(
            host=(host or "").rstrip("/"),
            shop=shop,
            api_key=api_key,
            api_secret=api_secret,
            scopes=_get(env, "SHOPIFY_SCOPES", DEFAULT_SCOPES) or DEFAULT_SCOPES,
            admin_api_access_token=admin_token,
            api_version=_get(env, "SHOPIFY_API_VERSION", DEFAULT_API_VERSION)
            or DEFAULT_API_VERSION,
            script_display_scope=_get(env, "SCRIPT_DISPLAY_SCOPE"),
            field_selector=_get(env, "PO_FIELD_SELECTOR", DEFAULT_FIELD_SELECTOR)
            or DEFAULT_FIELD_SELECTOR,
            auth_request_ttl=_get_int(env, "AUTH_REQUEST_TTL", DEFAULT_AUTH_REQUEST_TTL),
            session_ttl=_get_int(env, "SESSION_TTL", 86400),
            http_timeout=_get_float(env, "HTTP_TIMEOUT", 10.0),
            port=_get_int(env, "PORT", 3000),
            log_level=(_get(env, "LOG_LEVEL", "INFO") or "INFO").upper(),
        )
        logger.info(
            "Configuration loaded (oauth=%s, admin_token=%s, api_version=%s)",
            config.oauth_enabled,
            config.admin_token_enabled,
            config.api_version,
        )
        return config

    @property
    def oauth_enabled(self) -> bool:
        return bool(self.api_key and self.api_secret)

    @property
    def admin_token_enabled(self) -> bool:
        return bool(self.admin_api_access_token and self.shop)

    @property
    def redirect_uri(self) -> str:
        return f"{self.host}/auth/callback"

    @property
    def script_url(self) -> str:
        """Public URL the platform loads the injected script from."""
        return f"{self.host}/{SCRIPT_FILENAME}"
