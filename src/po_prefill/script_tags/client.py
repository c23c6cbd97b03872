"""Thin ``requests`` wrapper around the platform's script tag endpoints.

Every call is authenticated with the credential's access token and bound to
the credential's shop, so a token can never be sent to another shop.
Network errors, timeouts, non-2xx statuses and malformed bodies all surface
as :class:`~po_prefill.shop_auth.errors.UpstreamError`.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import requests

from po_prefill.script_tags.models import ScriptTag
from po_prefill.shop_auth.errors import UpstreamError
from po_prefill.shop_auth.models import Credential

logger = logging.getLogger("po-prefill.script_tags.client")

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"


@runtime_checkable
class ScriptTagApi(Protocol):
    """Minimal contract the reconciler needs from the platform."""

    def list_script_tags(self, credential: Credential) -> list[ScriptTag]: ...

    def create_script_tag(
        self,
        credential: Credential,
        *,
        src: str,
        event: str,
        display_scope: str | None = None,
    ) -> ScriptTag: ...

    def delete_script_tag(self, credential: Credential, tag_id: int) -> None: ...


class ScriptTagClient(ScriptTagApi):
    """Admin REST API client for the ``script_tags`` resource."""

    def __init__(
        self,
        *,
        api_version: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_version = api_version
        self.timeout = timeout
        self._session = session or requests.Session()

    def _url(self, shop: str, path: str) -> str:
        return f"https://{shop}/admin/api/{self.api_version}/{path}"

    def _request(
        self,
        method: str,
        credential: Credential,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = self._url(credential.shop, path)
        headers = {
            ACCESS_TOKEN_HEADER: credential.access_token,
            "Accept": "application/json",
        }
        if json is not None:
            headers["Content-Type"] = "application/json"

        try:
            resp = self._session.request(
                method, url, headers=headers, json=json, timeout=self.timeout
            )
        except requests.Timeout as exc:
            raise UpstreamError(f"{method} {path} timed out", url=url) from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"{method} {path} failed: {exc}", url=url) from exc

        if not resp.ok:
            raise UpstreamError(
                f"{method} {path} returned {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
                url=url,
            )
        if method == "DELETE" or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"{method} {path} returned a non-JSON body",
                status_code=resp.status_code,
                url=url,
            ) from exc

    def list_script_tags(self, credential: Credential) -> list[ScriptTag]:
        data = self._request("GET", credential, "script_tags.json")
        if not isinstance(data, dict) or not isinstance(data.get("script_tags"), list):
            raise UpstreamError("script_tags list response is malformed")
        try:
            return [ScriptTag.from_api(item) for item in data["script_tags"]]
        except (TypeError, ValueError) as exc:
            raise UpstreamError(f"script_tags list response is malformed: {exc}") from exc

    def create_script_tag(
        self,
        credential: Credential,
        *,
        src: str,
        event: str,
        display_scope: str | None = None,
    ) -> ScriptTag:
        body: dict[str, Any] = {"event": event, "src": src}
        if display_scope:
            body["display_scope"] = display_scope
        data = self._request("POST", credential, "script_tags.json", json={"script_tag": body})
        if not isinstance(data, dict) or not isinstance(data.get("script_tag"), dict):
            raise UpstreamError("script_tag create response is malformed")
        try:
            return ScriptTag.from_api(data["script_tag"])
        except (TypeError, ValueError) as exc:
            raise UpstreamError(f"script_tag create response is malformed: {exc}") from exc

    def delete_script_tag(self, credential: Credential, tag_id: int) -> None:
        self._request("DELETE", credential, f"script_tags/{tag_id}.json")
