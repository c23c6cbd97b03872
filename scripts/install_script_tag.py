"""install_script_tag.py

Install or inspect the PO Number Prefill script tag using the static admin
API token, without going through the browser OAuth flow.

Reads the usual environment (``HOST``, ``SHOP``, ``ADMIN_API_ACCESS_TOKEN``,
``SHOPIFY_API_VERSION``) from the process or a dotenv file.

Example
-------
    python scripts/install_script_tag.py --env-file .env install
    python scripts/install_script_tag.py list --json
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from po_prefill.config import SCRIPT_FILENAME, AppConfig, ConfigError
from po_prefill.script_tags.client import ScriptTagClient
from po_prefill.script_tags.reconciler import ScriptTagReconciler
from po_prefill.shop_auth.errors import UpstreamError
from po_prefill.shop_auth.service import ShopAuthService
from po_prefill.utils.logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Install or list the PO Number Prefill script tag."
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="dotenv file to load (default: .env)",
    )
    parser.add_argument("--json", action="store_true", help="print JSON output")
    parser.add_argument("command", choices=("install", "list"))
    args = parser.parse_args(argv)

    load_dotenv(args.env_file, override=False)
    try:
        config = AppConfig.from_env()
    except ConfigError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        return 2
    configure_logging(config.log_level)

    credential = ShopAuthService(config).admin_credential()
    if credential is None:
        print("✖ ADMIN_API_ACCESS_TOKEN and SHOP must be set.", file=sys.stderr)
        return 2

    reconciler = ScriptTagReconciler(
        ScriptTagClient(api_version=config.api_version, timeout=config.http_timeout)
    )
    try:
        if args.command == "install":
            tags = [
                reconciler.reconcile(
                    credential,
                    config.script_url,
                    "onload",
                    match=SCRIPT_FILENAME,
                    display_scope=config.script_display_scope,
                )
            ]
        else:
            tags = reconciler.list_resources(credential)
    except UpstreamError as exc:
        print(f"✖ {args.command} FAILED – {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([tag.to_dict() for tag in tags], indent=2))
    else:
        for tag in tags:
            print(f"ID: {tag.id} - Source: {tag.src} - Event: {tag.event}")
        if args.command == "install":
            print(f"✔ Script tag installed on {credential.shop}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
