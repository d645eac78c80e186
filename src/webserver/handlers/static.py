"""
=============================================================================
STATIC RESOURCE RESPONDER
=============================================================================

Turns a request path into a file on disk and sends it.

    resp_file(conn, cache, "/profile.html")
        │
        ├──► resolve    "./serverroot" + "/profile.html"
        ├──► check      still inside ./serverroot?      no  → 404
        ├──► load       cache (if enabled) or disk       missing → 404
        ├──► MIME       ".html" → text/html
        └──► send       HTTP/1.1 200 OK

    resp_404(conn)
        │
        ├──► load       "./serverfiles/404.html"         missing → built-in text
        └──► send       HTTP/1.1 404 NOT FOUND

=============================================================================
A MISSING FILE IS A 404, NOT A CRASH
=============================================================================

A file that is not there only ever affects the connection that asked for
it. load_file() raises ResourceNotFound, the responder catches it and sends
the 404 page instead. Even a missing 404.html only downgrades the 404 page to
a short plain-text body; it never takes the server down.

=============================================================================
PATH TRAVERSAL
=============================================================================

The request path is appended to the document root, then the result is
canonicalized (".." collapsed, symlinks followed) and must still be inside
the root:

    /index.html                  → ./serverroot/index.html          ✓
    /../serverfiles/404.html     → ./serverfiles/404.html           ✗ 404
    /../../etc/passwd            → /etc/passwd                      ✗ 404

Rejected paths are answered exactly like missing files, so a probe learns
nothing about what exists outside the root.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..errors import ResourceNotFound
from ..http.mime_types import get_mime_type
from ..http.response import STATUS_OK, STATUS_NOT_FOUND, send_response
from ..resources.cache import Cache
from ..resources.files import FilePayload, load_file


logger = logging.getLogger(__name__)

NOT_FOUND_PAGE = "404.html"

# Sent when serverfiles/404.html itself is missing
FALLBACK_404_BODY = b"404 Not Found"
FALLBACK_404_TYPE = "text/plain"


class StaticResponder:
    """
    Sends resource files from the document root and the 404 page from the
    system-files root.

    Usage:
        static = StaticResponder("./serverroot", "./serverfiles")
        static.resp_file(conn, cache, "/index.html")
        static.resp_404(conn)
    """

    def __init__(self, server_root: str, server_files: str, use_cache: bool = False):
        """
        Args:
            server_root: Document root. Only files inside it are served.
            server_files: Directory holding 404.html.
            use_cache: Read through the cache passed to resp_file(). When
                       False the cache argument is ignored.
        """
        # Resolve once so the containment check compares canonical paths
        self.server_root = Path(server_root).resolve()
        self.server_files = Path(server_files).resolve()
        self.use_cache = use_cache

        if not self.server_root.is_dir():
            logger.warning(f"Document root does not exist: {server_root}")
        if not (self.server_files / NOT_FOUND_PAGE).is_file():
            logger.warning(f"No {NOT_FOUND_PAGE} in {server_files}, using built-in 404 body")

    def resolve(self, request_path: str) -> Path:
        """
        Map a request path to a file path inside the document root.

        Raises:
            ResourceNotFound: If the canonical path escapes the root.
        """
        full_path = (self.server_root / request_path.lstrip("/")).resolve()

        try:
            full_path.relative_to(self.server_root)
        except ValueError:
            raise ResourceNotFound(request_path, reason="outside document root") from None

        return full_path

    def _load(self, cache: Optional[Cache], file_path: Path) -> FilePayload:
        if not (self.use_cache and cache is not None):
            return load_file(file_path)

        key = str(file_path)
        payload = cache.get(key)
        if payload is None:
            payload = load_file(file_path)
            cache.put(key, payload)
        return payload

    def resp_file(self, conn, cache: Optional[Cache], request_path: str) -> Optional[int]:
        """
        Send a file from the document root with status 200.

        Falls back to resp_404() when the path is outside the root or the
        file cannot be loaded.

        Returns:
            Bytes sent, or None if nothing could be sent.
        """
        try:
            file_path = self.resolve(request_path)
            payload = self._load(cache, file_path)
        except ResourceNotFound as e:
            logger.warning(f"[{conn.id}] Cannot serve {request_path}: {e.reason}")
            return self.resp_404(conn)

        mime_type = get_mime_type(file_path)
        return send_response(conn, STATUS_OK, mime_type, payload.data, payload.size)

    def resp_404(self, conn) -> Optional[int]:
        """Send the system 404 page with status 404."""
        file_path = self.server_files / NOT_FOUND_PAGE

        try:
            payload = load_file(file_path)
        except ResourceNotFound:
            logger.error(f"[{conn.id}] Cannot find system {NOT_FOUND_PAGE} file in {self.server_files}")
            return send_response(conn, STATUS_NOT_FOUND, FALLBACK_404_TYPE, FALLBACK_404_BODY)

        return send_response(
            conn, STATUS_NOT_FOUND, get_mime_type(file_path), payload.data, payload.size
        )
