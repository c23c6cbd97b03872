"""PO Number Prefill: injects a checkout script that fills the PO Number field
from the cart note."""

from __future__ import annotations

import argparse
import logging
import sys

__version__ = "0.2.0"

logger = logging.getLogger("po-prefill")


def main(argv: list[str] | None = None) -> int:
    """Run the HTTP server (``po-prefill`` console script)."""
    parser = argparse.ArgumentParser(prog="po-prefill", description=__doc__)
    parser.add_argument("--bind", default="0.0.0.0", help="interface to listen on")
    parser.add_argument("--port", type=int, default=None, help="overrides PORT")
    parser.add_argument("--env-file", default=".env", help="dotenv file to load")
    args = parser.parse_args(argv)

    import uvicorn
    from dotenv import load_dotenv

    from po_prefill.config import AppConfig, ConfigError
    from po_prefill.servers.main import create_app
    from po_prefill.utils.logging import configure_logging

    # real environment variables win over the dotenv file
    load_dotenv(args.env_file, override=False)

    try:
        config = AppConfig.from_env()
    except ConfigError as exc:
        configure_logging("INFO")
        logger.error("%s", exc)
        return 2

    configure_logging(config.log_level)
    port = args.port or config.port
    logger.info("PO Number Prefill App listening at http://localhost:%s", port)
    uvicorn.run(
        create_app(config),
        host=args.bind,
        port=port,
        log_level=config.log_level.lower(),
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
