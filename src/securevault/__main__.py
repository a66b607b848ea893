# Main Entry Point - API Server
#
# Loads settings from the environment (.env supported), configures
# logging and runs the FastAPI backend under uvicorn.
# A missing SECUREVAULT_TOKEN_SECRET aborts startup.

import argparse
import logging
import sys

from . import __version__
from .config import load_settings
from .core import configure_logging
from .vault.errors import ConfigurationError

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main entry point for SecureVault."""
    parser = argparse.ArgumentParser(
        description="SecureVault - dual-secret personal password vault API",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Bind address (default: SECUREVAULT_HOST or 127.0.0.1)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port (default: SECUREVAULT_PORT or 8000)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"SecureVault v{__version__}"
    )

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port

    configure_logging(settings.log_level, json_output=settings.log_json)
    logger.info("SecureVault v%s starting on %s:%s", __version__, settings.host, settings.port)

    from .api.main import start_api_server

    try:
        start_api_server(settings)
    except KeyboardInterrupt:
        logger.info("SecureVault stopped (user interrupt)")


if __name__ == "__main__":
    main()
