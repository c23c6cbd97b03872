"""HTTP layer: Starlette routes, middleware and request helpers."""

from .main import build_context, create_app  # noqa: F401

__all__ = ["build_context", "create_app"]
