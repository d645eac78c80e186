"""
=============================================================================
WEBSERVER
=============================================================================

Wires the pieces together and supervises the accept loop.

    ┌────────────────────────────────────────────────────────────────────┐
    │                           WebServer                                │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                    │
    │   Cache(10, 0)            created once, lives for the process      │
    │   StaticResponder         ./serverroot + ./serverfiles             │
    │   Router                  GET / POST / 404                         │
    │   SocketServer            listen, accept, one connection at a time │
    │                                                                    │
    │   for each accepted connection:                                    │
    │       router.handle_http_request(conn, cache)                      │
    │       conn.close()                                                 │
    │                                                                    │
    └────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURE ISOLATION
=============================================================================

    bind()/listen() fails          → OSError out of run(): fatal
    accept() fails                 → logged in SocketServer, loop continues
    recv()/send() fails            → logged, connection closed, loop continues
    anything else in a handler     → logged with traceback, connection
                                     closed, loop continues

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import StaticResponder
from .http.router import Router
from .resources import Cache


logger = logging.getLogger(__name__)


class WebServer:
    """
    Single-threaded static webserver.

    Usage:
        server = WebServer(ServerConfig(port=3490))
        server.run()    # Blocks until Ctrl+C / SIGTERM / shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self.cache = Cache(self.config.cache_capacity, self.config.cache_policy)

        self.static = StaticResponder(
            self.config.server_root,
            self.config.server_files,
            use_cache=self.config.use_cache,
        )
        self.router = Router(self.static)

        self._socket_server = SocketServer(self.config)
        self.connections_handled = 0

    @property
    def address(self):
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    def listen(self):
        """
        Open the listening socket without entering the loop.

        Raises:
            OSError: If bind()/listen() fails.
        """
        self._socket_server.listen()

    def run(self):
        """
        Listen and serve until shutdown.

        Raises:
            OSError: If the listening socket cannot be opened.
        """
        logger.info(
            f"Starting {self.config.server_name} "
            f"(root={self.config.server_root}, files={self.config.server_files}, "
            f"cache={self.cache!r}, use_cache={self.config.use_cache})"
        )
        self._socket_server.start(self._handle_connection)
        logger.info(f"Server stopped after {self.connections_handled} connections")

    def shutdown(self):
        """Ask the accept loop to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def close(self):
        """Close the listening socket opened by listen()."""
        self._socket_server.close()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_listening(timeout)

    def _handle_connection(self, conn: Connection):
        """One request/response cycle, then close, whatever happens."""
        with conn:
            try:
                self.router.handle_http_request(conn, self.cache)
            except Exception as e:
                logger.exception(f"[{conn.id}] Unhandled error: {e}")
        self.connections_handled += 1


def setup_logging(level: str = "INFO"):
    """Configure root logging for the CLI."""
    numeric = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("webserver").setLevel(numeric)
