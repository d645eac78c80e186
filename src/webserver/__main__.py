"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m webserver                     # port 3490, ./serverroot, ./serverfiles
    python -m webserver --port 8080
    python -m webserver --root ./public --files ./system
    python -m webserver --use-cache --log-level DEBUG

    curl -D - http://localhost:3490/
    curl -D - http://localhost:3490/profile/alice
    curl -D - -X POST -d 'Hello, sample data!' http://localhost:3490/save

Settings are layered: built-in defaults, then WEBSERVER_* environment
variables, then flags.

=============================================================================
EXIT STATUS
=============================================================================

    0   Stopped by Ctrl+C / SIGTERM
    1   Could not open the listening socket (EXIT_LISTENER_FAILURE)
    2   Invalid arguments or configuration (argparse convention)

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .config import ServerConfig, EXIT_LISTENER_FAILURE, LOG_LEVELS
from .server import WebServer, setup_logging


logger = logging.getLogger("webserver")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webserver",
        description="Single-threaded static HTTP/1.1 webserver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Routes:
  GET  /profile/<token>   serverroot/profile.html
  GET  <anything else>    serverroot/index.html
  POST <anything>         404 (serverfiles/404.html)
        """,
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Address to bind to (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 3490)",
    )

    parser.add_argument(
        "--root",
        default=None,
        help="Document root (default: ./serverroot)",
    )

    parser.add_argument(
        "--files",
        default=None,
        help="System files directory holding 404.html (default: ./serverfiles)",
    )

    parser.add_argument(
        "--use-cache",
        action="store_true",
        default=None,
        help="Serve repeated files from the in-memory cache",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webserver {__version__}",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then any flag that was actually given."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.root is not None:
        config.server_root = args.root
    if args.files is not None:
        config.server_files = args.files
    if args.use_cache:
        config.use_cache = True
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    # Before WebServer(), which already logs about missing directories
    setup_logging(config.log_level)
    server = WebServer(config)

    try:
        server.run()
    except OSError as e:
        logger.critical(f"Fatal error getting listening socket: {e}")
        return EXIT_LISTENER_FAILURE

    return 0


if __name__ == "__main__":
    sys.exit(main())
