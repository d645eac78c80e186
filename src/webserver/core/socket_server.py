"""
=============================================================================
LISTENING SOCKET AND ACCEPT LOOP
=============================================================================

The "ears" of the server: one listening socket, one loop, one connection
at a time.

SOCKET LIFECYCLE (server side):
───────────────────────────────

    1. socket()    Create the TCP socket
    2. bind()      Reserve host:port       ─┐  failure here is FATAL:
    3. listen()    Start the accept queue  ─┘  the server has no purpose
    4. accept()    Wait for a client          without a listener
    5. handler     One request, one response
    6. close()     Back to 4

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── created once at startup
                    └───────────┬───────────┘
                                │ accept()
                                ▼
                    ┌───────────────────────┐
                    │   Client Socket       │ ◄── handled start-to-finish,
                    └───────────────────────┘     then closed, then the
                                                  next accept() happens

=============================================================================
ONE CLIENT AT A TIME
=============================================================================

There is no thread pool and no event loop. While one connection is being
served, a second client's connect() completes in the kernel (it sits in the
listen backlog) but accept() is not called until the first connection is
closed. A slow client therefore stalls everyone behind it. That is the
whole concurrency model of this server.

=============================================================================
SHUTDOWN
=============================================================================

accept() is given a 1 second timeout. A timeout is not an error: the loop
just checks whether shutdown() was requested (Ctrl+C, SIGTERM, or another
thread) and waits again. Accepted client sockets do not inherit this
timeout.

A signal that arrives while a connection is blocked in recv() does not
interrupt it: Python retries the call once the handler returns. shutdown()
therefore also aborts the connection in hand (shutdown(SHUT_RDWR) on its
socket), so the blocked recv() returns b"" and the loop can exit.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

# How often accept() wakes up to check for shutdown
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Owns the listening socket and the sequential accept loop. Each accepted
    connection is wrapped in a Connection and handed to a callback; the
    callback returns only when that connection is finished.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)   # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening, so tests and embedding code
        # can wait for the real (possibly OS-assigned) port.
        self._listening_event = threading.Event()

        # The connection currently being served, so shutdown() can wake
        # a recv() that is blocked on a silent client.
        self._active: Optional[Connection] = None

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        Differs from the configured one when port 0 asked the OS to choose.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create the listening socket with SO_REUSEADDR set."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting the server must not fail with "Address already in use"
        # while old connections sit in TIME_WAIT.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Turn SIGINT/SIGTERM into a clean shutdown.

        Python only allows installing handlers from the main thread; when
        the server runs in a background thread (tests), the caller is
        expected to use shutdown() instead.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def listen(self):
        """
        Create, bind and listen.

        Raises:
            OSError: If the port cannot be bound or listened on. The socket
                     is closed before the error propagates.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to listen on {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        host, port = self.address
        logger.info(f"Waiting for connections on {host}:{port}...")
        self._listening_event.set()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Listen (if not already listening) and run the accept loop.

        Blocks until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection. It must
                                fully handle and close the connection before
                                returning; the next accept() waits for it.

        Raises:
            OSError: If the listening socket cannot be opened.
        """
        if self._socket is None:
            self.listen()

        self._running = True
        self._setup_signals()

        try:
            self._accept_loop(connection_handler)
        finally:
            self.close()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections one at a time until shutdown.

        A failed accept() is logged and the loop carries on; only shutdown()
        ends it.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Poll tick, check _running again
            except OSError as e:
                if not self._running:
                    break  # Listening socket closed by shutdown
                logger.error(f"Accept error: {e}")
                continue

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            )
            # Published before the handler starts: shutdown() either sees it
            # and aborts it, or ran first and is caught by the check below.
            self._active = conn
            try:
                if self._running:
                    logger.info(f"Got connection from {conn.client_ip}")
                    connection_handler(conn)
                else:
                    conn.close()
            finally:
                self._active = None

    def shutdown(self):
        """
        Stop the accept loop. Safe to call more than once, from any thread
        or from a signal handler.

        A connection still being served is aborted, which wakes a recv()
        blocked on a client that never sends.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

        conn = self._active
        if conn is not None:
            conn.abort()

    def close(self):
        """Restore signal handlers and close the listening socket."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._listening_event.clear()
        logger.info("Socket server stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._listening_event.wait(timeout)
