"""
Core networking: the listening socket, the accept loop and the
per-client Connection wrapper.
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = ["Connection", "ConnectionState", "SocketServer"]
