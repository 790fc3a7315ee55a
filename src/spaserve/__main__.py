"""
=============================================================================
COMMAND LINE INTERFACE
=============================================================================

    python -m spaserve ./dist
    python -m spaserve ./dist --port 3000 --host 0.0.0.0
    python -m spaserve ./dist --index app.html --log-format json
    spaserve --from-env                    (SPASERVE_* variables)

Options given on the command line override the environment.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import SPAConfig, LOG_FORMATS
from .server import SPAServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spaserve",
        description="Serve a Single Page Application bundle, "
                    "rewriting <base href> for reverse-proxy prefixes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Directory holding the SPA bundle (default: SPASERVE_ROOT or .)"
    )
    parser.add_argument(
        "--index", "-i",
        default=None,
        help="Index document, relative to ROOT (default: index.html)"
    )
    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum number of worker threads (default: 16)"
    )
    parser.add_argument(
        "--cache-max-age",
        type=int,
        default=None,
        help="Cache-Control max-age for static assets, in seconds (default: 3600)"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )
    parser.add_argument(
        "--from-env",
        action="store_true",
        help="Start from SPASERVE_* environment variables"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"spaserve {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> SPAConfig:
    """Merge parsed arguments over the environment (or the defaults)."""
    config = SPAConfig.from_env() if args.from_env else SPAConfig()

    if args.root is not None:
        config.root_dir = args.root
    if args.index is not None:
        config.index = args.index
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.max_workers = args.workers
        config.min_workers = min(config.min_workers, args.workers)
    if args.cache_max_age is not None:
        config.cache_max_age = args.cache_max_age
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    try:
        server = SPAServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
