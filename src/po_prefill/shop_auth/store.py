"""In-memory storage for per-browser :class:`AuthSession` values.

Credentials are never written to disk.  Sessions live in a
:class:`cachetools.TTLCache`, so they expire after ``ttl_seconds`` of
inactivity and the oldest are evicted once ``maxsize`` is reached.  A process
restart forgets every session and merchants simply run the OAuth flow again.
"""

from __future__ import annotations

import secrets
import threading
from typing import Protocol, runtime_checkable

from cachetools import TTLCache

from po_prefill.shop_auth.clock import Clock, default_clock
from po_prefill.shop_auth.models import AuthSession


@runtime_checkable
class SessionStore(Protocol):
    """Minimal persistence contract for auth sessions."""

    def new_session_id(self) -> str: ...
    def get(self, session_id: str | None) -> AuthSession | None: ...
    def save(self, session_id: str, session: AuthSession) -> None: ...
    def delete(self, session_id: str) -> None: ...


class MemorySessionStore(SessionStore):
    """Thread-safe TTL cache of sessions keyed by an opaque random id."""

    def __init__(
        self,
        *,
        ttl_seconds: int = 86400,
        maxsize: int = 1024,
        clock: Clock = default_clock,
    ) -> None:
        self._cache: TTLCache[str, AuthSession] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds, timer=clock
        )
        self._lock = threading.Lock()

    def new_session_id(self) -> str:
        return secrets.token_urlsafe(24)

    def get(self, session_id: str | None) -> AuthSession | None:
        if not session_id:
            return None
        with self._lock:
            return self._cache.get(session_id)

    def save(self, session_id: str, session: AuthSession) -> None:
        # re-inserting refreshes the TTL
        with self._lock:
            self._cache[session_id] = session

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._cache.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
