"""Script tag management: Admin API client and reconciler."""

from __future__ import annotations

from .client import ScriptTagApi, ScriptTagClient  # noqa: F401
from .models import ScriptTag  # noqa: F401
from .reconciler import ScriptTagReconciler  # noqa: F401

__all__ = ["ScriptTag", "ScriptTagApi", "ScriptTagClient", "ScriptTagReconciler"]
