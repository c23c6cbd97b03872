"""Ensure exactly one script tag points at the injected prefill script.

:meth:`ScriptTagReconciler.reconcile` is a best-effort "ensure one" operation:

1. list every script tag of the credential's shop
2. pick the ones whose ``src`` contains the match pattern
3. delete them one by one; a failed delete is logged and skipped
4. create a single fresh tag for the target URL

Upstream failures while listing or creating abort the call.  Failed deletes
do not, so a reconcile can leave a stale duplicate behind; the next reconcile
removes it.  All upstream calls run sequentially, list before delete before
create.

Reconciles for the same shop are serialised inside one process.  Two
processes reconciling the same shop concurrently can still both create a tag.
"""

from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

from po_prefill.script_tags.client import ScriptTagApi
from po_prefill.script_tags.models import ScriptTag
from po_prefill.shop_auth.errors import UpstreamError
from po_prefill.shop_auth.log_utils import get_auth_logger
from po_prefill.shop_auth.models import Credential

_LOG = logging.getLogger("po-prefill.script_tags.reconciler")


class ScriptTagReconciler:
    """Application service for listing and reconciling script tags."""

    def __init__(self, api: ScriptTagApi) -> None:
        self.api = api
        # entries vanish once no reconcile holds or waits on the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    @contextmanager
    def _shop_lock(self, shop: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.get(shop)
            if lock is None:
                lock = self._locks[shop] = threading.Lock()
        with lock:
            yield

    def list_resources(self, credential: Credential) -> list[ScriptTag]:
        """Return the shop's script tags in the order the platform sent them."""
        return self.api.list_script_tags(credential)

    def create_resource(
        self,
        credential: Credential,
        target_url: str,
        event: str = "onload",
        *,
        display_scope: str | None = None,
    ) -> ScriptTag:
        """Create a script tag without touching existing ones."""
        tag = self.api.create_script_tag(
            credential, src=target_url, event=event, display_scope=display_scope
        )
        get_auth_logger(
            base_logger_name=_LOG.name, shop=credential.shop
        ).info("Created script tag id=%s src=%s", tag.id, tag.src)
        return tag

    def reconcile(
        self,
        credential: Credential,
        target_url: str,
        event: str = "onload",
        *,
        match: str | None = None,
        display_scope: str | None = None,
        correlation_id: str | None = None,
    ) -> ScriptTag:
        """Replace every tag matching *match* with one tag for *target_url*.

        Args:
            credential: Token bound to the shop being reconciled.
            target_url: ``src`` of the tag that must exist afterwards.
            event: Platform event that loads the script.
            match: Substring selecting tags to delete; defaults to *target_url*.
            display_scope: Optional ``display_scope`` for the created tag.
            correlation_id: Request id used in log records.

        Returns:
            The newly created script tag.

        Raises:
            UpstreamError: Listing or creating failed.
        """
        pattern = match or target_url
        log = get_auth_logger(
            base_logger_name=_LOG.name,
            shop=credential.shop,
            correlation_id=correlation_id,
        )

        with self._shop_lock(credential.shop):
            existing = self.api.list_script_tags(credential)
            stale = [tag for tag in existing if tag.matches(pattern)]
            log.info(
                "Found %d script tag(s), %d matching %r", len(existing), len(stale), pattern
            )

            for tag in stale:
                try:
                    self.api.delete_script_tag(credential, tag.id)
                except UpstreamError as exc:
                    log.warning("Could not delete script tag %s: %s", tag.id, exc)
                    continue
                log.info("Deleted script tag %s", tag.id)

            created = self.api.create_script_tag(
                credential, src=target_url, event=event, display_scope=display_scope
            )
        log.info("Created script tag id=%s src=%s", created.id, created.src)
        return created
