"""
=============================================================================
ERROR TYPES
=============================================================================

Every failure the server knows how to name derives from WebServerError.

    WebServerError
        ├── ResourceNotFound        file missing, not a file, or outside root
        ├── RequestParseError       request line could not be tokenized
        └── ResponseTooLargeError   serialized response exceeds the buffer

None of these ever terminates the process. The only fatal condition is
failing to open the listening socket, which surfaces as a plain OSError
from bind()/listen() and is handled by the CLI entry point.

=============================================================================
"""


class WebServerError(Exception):
    """Base class for all webserver errors."""


class ResourceNotFound(WebServerError):
    """
    Raised when a resource file cannot be served.

    Carries the path that was requested so the caller can log it.
    The responder turns this into a 404 for the single connection.
    """

    def __init__(self, path: str, reason: str = "no such file"):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class RequestParseError(WebServerError):
    """Raised when the request line is empty or its tokens are oversized."""


class ResponseTooLargeError(WebServerError):
    """
    Raised when a serialized response would not fit the response buffer.

    The limit is a hard ceiling: nothing is sent for such a response.
    """

    def __init__(self, size: int, limit: int):
        super().__init__(f"Response of {size} bytes exceeds {limit} byte buffer")
        self.size = size
        self.limit = limit
