"""Script tag records returned by the Admin REST API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class ScriptTag:
    """A platform-side script tag; identity is the platform-assigned ``id``."""

    id: int
    src: str
    event: str = "onload"
    display_scope: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "ScriptTag":
        """Build a record from one element of the ``script_tags`` payload.

        Raises:
            ValueError: If *data* is not an object or lacks ``id`` or ``src``.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"script tag payload is not an object: {type(data).__name__}")
        if "id" not in data or not data.get("src"):
            raise ValueError("script tag payload lacks id or src")
        return cls(
            id=int(data["id"]),
            src=str(data["src"]),
            event=str(data.get("event") or "onload"),
            display_scope=data.get("display_scope"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def matches(self, pattern: str) -> bool:
        """Return *True* if ``src`` contains *pattern*."""
        return bool(pattern) and pattern in self.src

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event": self.event,
            "src": self.src,
            "display_scope": self.display_scope,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
