"""playdeck entry point.

Examples:
  playdeck                       Serve on $HOST:$PORT (default 0.0.0.0:10000)
  playdeck --port 8888           Serve on another port
  playdeck --dev                 Auto-reload on source changes
"""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from playdeck.config import get_settings
from playdeck.errors import ConfigError
from playdeck.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _package_version() -> str:
    try:
        return get_version("playdeck")
    except PackageNotFoundError:
        from playdeck import __version__

        return __version__


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="playdeck - Spotify dashboard backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--host", default=None, help="Bind address (default: $HOST)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port (default: $PORT)")
    parser.add_argument("--dev", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("--log-level", default=None, help="Logging level (default: $LOG_LEVEL)")
    parser.add_argument(
        "--version", "-v", action="version", version=f"%(prog)s {_package_version()}"
    )
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level)

    missing = settings.missing_required()
    if missing:
        logger.error("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    from playdeck.server import run_server

    try:
        run_server(host=args.host, port=args.port, dev=args.dev)
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("👋 playdeck stopped.")


if __name__ == "__main__":
    main()
