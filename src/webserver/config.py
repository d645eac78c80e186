"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized settings for the webserver.

With no configuration at all the server behaves exactly like its fixed,
hard-wired ancestor: one port, one document root, one system-files root,
a 10-entry cache that the request path never consults.

=============================================================================
WHERE VALUES COME FROM
=============================================================================

    ┌──────────────────────────┐
    │ ServerConfig() defaults  │   Fixed values (port 3490, ./serverroot ...)
    └────────────┬─────────────┘
                 │ overridden by
    ┌────────────▼─────────────┐
    │ ServerConfig.from_env()  │   WEBSERVER_* environment variables
    └────────────┬─────────────┘
                 │ overridden by
    ┌────────────▼─────────────┐
    │ python -m webserver ...  │   Command-line flags (see __main__.py)
    └──────────────────────────┘

=============================================================================
FIXED BUFFERS
=============================================================================

The request and response buffer sizes are NOT configurable. They are part
of the wire behavior:

    REQUEST_BUFFER_SIZE   64 KiB    one recv() of at most 64 KiB - 1 bytes
    RESPONSE_BUFFER_SIZE  256 KiB   hard ceiling on a serialized response

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


REQUEST_BUFFER_SIZE = 65536    # 64 KiB
RESPONSE_BUFFER_SIZE = 262144  # 256 KiB, 2**18

# Process exit status when the listening socket cannot be opened
EXIT_LISTENER_FAILURE = 1

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the webserver.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    FILESYSTEM LAYOUT
    - server_root (document root), server_files (system files: 404.html)

    CACHE
    - cache_capacity, cache_policy, use_cache

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    "0.0.0.0" listens on every interface, like a passive getaddrinfo().
    """

    port: int = 3490
    """
    The port number to listen on.
    0 lets the OS pick a free port (used by the tests).
    """

    backlog: int = 10
    """Maximum number of connections queued while one is being served."""

    timeout: Optional[float] = None
    """
    Receive/send timeout for accepted connections, in seconds.
    None = block forever (a silent client stalls the server).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILESYSTEM LAYOUT
    # ─────────────────────────────────────────────────────────────────────

    server_root: str = "./serverroot"
    """Document root: index.html, profile.html and anything else served."""

    server_files: str = "./serverfiles"
    """System files root: holds 404.html."""

    # ─────────────────────────────────────────────────────────────────────
    # CACHE
    # ─────────────────────────────────────────────────────────────────────

    cache_capacity: int = 10
    cache_policy: int = 0
    """0 = LRU, 1 = FIFO. See resources/cache.py."""

    use_cache: bool = False
    """
    Consult the cache before reading from disk.
    Off by default: the cache is created but the request path bypasses it.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    server_name: str = "webserver/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBSERVER_HOST       Bind address (default: 0.0.0.0)
        WEBSERVER_PORT       Listening port (default: 3490)
        WEBSERVER_ROOT       Document root (default: ./serverroot)
        WEBSERVER_FILES      System files root (default: ./serverfiles)
        WEBSERVER_USE_CACHE  "1"/"true"/"yes" to consult the cache
        WEBSERVER_TIMEOUT    Connection timeout in seconds (default: none)
        WEBSERVER_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("WEBSERVER_TIMEOUT")
        return cls(
            host=os.getenv("WEBSERVER_HOST", "0.0.0.0"),
            port=int(os.getenv("WEBSERVER_PORT", "3490")),
            server_root=os.getenv("WEBSERVER_ROOT", "./serverroot"),
            server_files=os.getenv("WEBSERVER_FILES", "./serverfiles"),
            use_cache=os.getenv("WEBSERVER_USE_CACHE", "").lower() in ("1", "true", "yes"),
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("WEBSERVER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails before the socket opens.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.cache_capacity < 1:
            raise ValueError("cache_capacity must be >= 1")

        if self.cache_policy not in (0, 1):
            raise ValueError(f"Unknown cache policy: {self.cache_policy}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
