"""Injectable time source; expiry checks take a ``Clock`` so tests can freeze time."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Callable protocol returning *seconds* since the UNIX epoch."""

    def __call__(self) -> float: ...


def default_clock() -> float:
    """Return ``time.time()``."""
    return time.time()


def frozen_clock(now: float) -> Clock:
    """Return a clock that always reports *now*."""
    return lambda now=now: now
