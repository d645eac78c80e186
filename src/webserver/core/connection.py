"""
=============================================================================
CONNECTION
=============================================================================

One accepted TCP socket, handled for exactly one request/response cycle.

    accept()  →  Connection  →  receive_request()  →  send()  →  close()
                    NEW            READING            WRITING     CLOSED

=============================================================================
ONE READ, NOT A STREAM READER
=============================================================================

TCP is a byte stream: a request the client wrote in one go may arrive in
several recv() calls. A full HTTP server loops until it sees \r\n\r\n.

This server does not. It calls recv() ONCE with a 64 KiB buffer and parses
whatever arrived. For the request lines it cares about (a few dozen bytes)
that is one segment in practice; a request split across packets is simply
parsed from its first fragment. That is a known limitation of the server,
kept deliberately small.

=============================================================================
"""

import socket
import time
import uuid
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..config import REQUEST_BUFFER_SIZE


logger = logging.getLogger(__name__)

# Limits on reading leftover client data in close()
DRAIN_TIMEOUT = 0.5
DRAIN_MAX_BYTES = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and close()."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Waiting in recv()
    PROCESSING = "processing"  # Request line parsed, routing
    WRITING = "writing"        # In sendall()
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The accepted client socket.
        address: Peer address as returned by accept().
        id: Short identifier used to tag log lines.
        timeout: Socket timeout in seconds, None to block forever.
        state: Current lifecycle state.
        created_at: When the connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timeout: Optional[float] = None
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        # Accepted sockets can inherit a timeout from the listener;
        # start from plain blocking mode, then apply our own.
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Peer IP address as text ("" for unnamed sockets)."""
        if isinstance(self.address, tuple) and self.address:
            return str(self.address[0])
        return str(self.address or "")

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def receive_request(self, buffer_size: int = REQUEST_BUFFER_SIZE) -> bytes:
        """
        Read the request with a single blocking recv().

        At most buffer_size - 1 bytes are read, mirroring a buffer that
        keeps one byte for its terminator.

        Returns:
            The received bytes. b"" means the peer closed without sending.

        Raises:
            OSError: If recv() fails (reset, timeout, ...). The caller logs
                     it and abandons the connection.
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(buffer_size - 1)
        self.state = ConnectionState.PROCESSING
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> Optional[int]:
        """
        Write the whole response.

        sendall() keeps calling send() until every byte is out, so a
        successful call always wrote len(data) bytes.

        Returns:
            len(data) on success, None if the peer went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return None
        return len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR) sends FIN: "no more data from us"
        2. Drain whatever the client still sent (e.g. a POST body that
           arrived after our single recv). Closing with unread data makes
           the kernel answer with RST, which can destroy the response
           before the client reads it.
        3. close() releases the descriptor.

        The drain stops after DRAIN_TIMEOUT seconds in total or
        DRAIN_MAX_BYTES bytes, whichever comes first.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_MAX_BYTES:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Includes socket.timeout

    def abort(self):
        """
        Cut the connection off from another thread or a signal handler.

        shutdown(SHUT_RDWR) makes a recv() blocked on this socket return
        b"". The descriptor itself is left for close().
        """
        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Not connected any more

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
