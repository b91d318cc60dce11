"""
=============================================================================
GEOWEATHER CLI ENTRY POINT
=============================================================================

    # Run with defaults (0.0.0.0:8080)
    python -m geoweather

    # Custom port, verbose logging
    python -m geoweather --port 3000 --log-level DEBUG

    # JSON access logs and a custom dataset
    python -m geoweather --log-format json --dataset ./cities.json

Environment variables (GEOWEATHER_HOST, GEOWEATHER_PORT, ...) supply the
defaults; flags given on the command line win.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig
from .server import GeoWeatherServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geoweather",
        description="Geo lookup and weather HTTP service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m geoweather                        # Run with defaults
  python -m geoweather --port 3000            # Custom port
  python -m geoweather --dataset cities.json  # Replace built-in locations
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / DATA
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level,
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--dataset", "-d",
        default=defaults.dataset_path,
        help="JSON file of locations replacing the built-in set"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"geoweather {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, build the server and run it. Returns the exit code."""
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment: {e}", file=sys.stderr)
        return 2

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        timeout=defaults.timeout,
        log_level=args.log_level,
        log_format=args.log_format,
        dataset_path=args.dataset,
    )

    try:
        server = GeoWeatherServer(config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
