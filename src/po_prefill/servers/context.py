from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from po_prefill.config import AppConfig
    from po_prefill.script_tags.reconciler import ScriptTagReconciler
    from po_prefill.shop_auth.service import ShopAuthService
    from po_prefill.shop_auth.store import SessionStore


@dataclass(frozen=True)
class AppContext:
    """
    Services shared by every request handler, built once at app creation and
    stored on ``app.state.ctx``.
    """

    config: AppConfig
    auth_service: ShopAuthService
    reconciler: ScriptTagReconciler
    sessions: SessionStore
    prefill_script: str
