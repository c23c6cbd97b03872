"""Render the storefront script with its runtime settings baked in."""

from __future__ import annotations

import json
from importlib import resources
from typing import Final, Sequence

from po_prefill.config import DEFAULT_FIELD_SELECTOR, SCRIPT_FILENAME

SETTINGS_PLACEHOLDER: Final[str] = "/*__PREFILL_SETTINGS__*/{}"
DEFAULT_DELAYS_MS: Final[tuple[int, ...]] = (1000, 2000, 3000)


def load_template() -> str:
    return (
        resources.files("po_prefill")
        .joinpath("static", SCRIPT_FILENAME)
        .read_text(encoding="utf-8")
    )


def render_prefill_script(
    *,
    field_selector: str = DEFAULT_FIELD_SELECTOR,
    delays_ms: Sequence[int] = DEFAULT_DELAYS_MS,
    cart_url: str = "/cart.js",
    checkout_path: str = "/checkout",
    template: str | None = None,
) -> str:
    """Return the script source with *field_selector* and friends injected.

    Raises:
        ValueError: If the template lacks the settings placeholder.
    """
    source = load_template() if template is None else template
    if SETTINGS_PLACEHOLDER not in source:
        raise ValueError("prefill script template has no settings placeholder")
    settings = {
        "cartUrl": cart_url,
        "checkoutPath": checkout_path,
        "fieldSelector": field_selector,
        "delays": [int(d) for d in delays_ms],
    }
    # "</" would end an inline <script> block if the file is ever inlined
    payload = json.dumps(settings, sort_keys=True).replace("</", "<\\/")
    return source.replace(SETTINGS_PLACEHOLDER, payload, 1)
