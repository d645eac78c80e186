"""
=============================================================================
REQUEST ROUTER
=============================================================================

Reads one request from a connection, picks a handler by method, and lets
the handler pick a page by path.

    ┌────────┬────────────────────┬──────────────────────┐
    │ Method │ Path               │ Response             │
    ├────────┼────────────────────┼──────────────────────┤
    │ GET    │ /profile/<token>   │ 200  profile.html    │
    │ GET    │ anything else      │ 200  index.html      │
    │ POST   │ anything           │ 404  404.html        │
    │ other  │ anything           │ 404  404.html        │
    └────────┴────────────────────┴──────────────────────┘

=============================================================================
REQUEST FLOW
=============================================================================

    handle_http_request(conn, cache)
        │
        ├──► conn.receive_request()       one recv(), at most 64 KiB - 1
        │       ├── OSError      → log, return (nothing sent)
        │       └── b""          → peer closed, return (nothing sent)
        │
        ├──► parse_request_line()
        │       ├── RequestParseError   → 404
        │       └── empty method/path   → 404
        │
        └──► dispatch table
                ├── "GET"  → handle_get()
                ├── "POST" → handle_post()
                └── other  → 404

The <token> in /profile/<token> must be non-empty. It is matched but never
used: nothing from the URL ends up in the response body.

=============================================================================
"""

import logging
from typing import Callable, Dict, Optional

from ..errors import RequestParseError
from ..handlers.static import StaticResponder
from ..resources.cache import Cache
from .request import ParsedRequest, parse_request_line, request_text


logger = logging.getLogger(__name__)

PROFILE_PREFIX = "/profile/"
PROFILE_PAGE = "/profile.html"
INDEX_PAGE = "/index.html"


MethodHandler = Callable[[object, Optional[Cache], ParsedRequest, bytes], Optional[int]]


class Router:
    """
    Method-based dispatcher for a single request.

    Usage:
        router = Router(StaticResponder("./serverroot", "./serverfiles"))
        router.handle_http_request(conn, cache)
    """

    def __init__(self, static: StaticResponder):
        self.static = static

        # Exact, case-sensitive method match
        self._handlers: Dict[str, MethodHandler] = {
            "GET": self.handle_get,
            "POST": self.handle_post,
        }

    @property
    def methods(self) -> list[str]:
        """Methods that have a handler."""
        return sorted(self._handlers)

    def handle_http_request(self, conn, cache: Optional[Cache]) -> Optional[int]:
        """
        Handle one request/response cycle on conn.

        Does not close the connection; the accept loop does that.

        Returns:
            Bytes sent, or None if no response was sent.
        """
        try:
            raw = conn.receive_request()
        except OSError as e:
            logger.error(f"[{conn.id}] recv: {e}")
            return None

        if not raw:
            logger.debug(f"[{conn.id}] Peer closed before sending a request")
            return None

        try:
            request = parse_request_line(raw)
        except RequestParseError as e:
            logger.warning(f"[{conn.id}] Malformed request line: {e}")
            return self.static.resp_404(conn)

        if request.is_empty:
            logger.warning(f"[{conn.id}] Incomplete request line: {request}")
            return self.static.resp_404(conn)

        handler = self._handlers.get(request.method)
        if handler is None:
            logger.debug(f"[{conn.id}] No handler for method {request.method!r}")
            return self.static.resp_404(conn)

        return handler(conn, cache, request, raw)

    def handle_get(self, conn, cache: Optional[Cache], request: ParsedRequest, raw: bytes) -> Optional[int]:
        """Serve profile.html for /profile/<token>, index.html for anything else."""
        logger.debug(f"[{conn.id}] GET: {request.path}")

        if is_profile_path(request.path):
            return self.static.resp_file(conn, cache, PROFILE_PAGE)
        return self.static.resp_file(conn, cache, INDEX_PAGE)

    def handle_post(self, conn, cache: Optional[Cache], request: ParsedRequest, raw: bytes) -> Optional[int]:
        """Nothing accepts posted data: always 404."""
        logger.debug(f"[{conn.id}] POST: {request_text(raw)!r}")
        return self.static.resp_404(conn)


def is_profile_path(path: str) -> bool:
    """
    Check for /profile/<token> with a non-empty token.

        >>> is_profile_path("/profile/alice")
        True
        >>> is_profile_path("/profile/")
        False
        >>> is_profile_path("/profiles/alice")
        False
    """
    return path.startswith(PROFILE_PREFIX) and len(path) > len(PROFILE_PREFIX)
