"""Aeroscan entry point.

Runs the API proxy with uvicorn. Host and port default to the values from
settings (``AEROSCAN_HOST`` / ``AEROSCAN_PORT``).
"""

import argparse
import logging

from aeroscan import __version__
from aeroscan.config import get_settings
from aeroscan.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Aeroscan - seats.aero award search proxy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  aeroscan                           Start the API proxy on 127.0.0.1:3001
  aeroscan --host 0.0.0.0 --port 8080
  aeroscan --dev                     Start with auto-reload
""",
    )
    parser.add_argument("--host", type=str, default=None, help="Host to bind")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port to bind")
    parser.add_argument("--dev", action="store_true", help="Auto-reload on code changes")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override AEROSCAN_LOG_LEVEL",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()
    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level)

    from aeroscan.api.serve import run_api_server

    try:
        run_api_server(
            host=args.host or settings.host,
            port=args.port or settings.port,
            dev=args.dev,
        )
    except KeyboardInterrupt:
        logger.info("Aeroscan stopped")


if __name__ == "__main__":
    main()
