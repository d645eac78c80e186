"""
HTTP layer: request-line parsing, response serialization, MIME lookup.

The router lives in webserver.http.router and is imported from there
directly; it depends on the handlers package, which depends on this one.
"""

from .request import ParsedRequest, parse_request_line, MAX_METHOD_LENGTH, MAX_PATH_LENGTH
from .response import (
    STATUS_OK,
    STATUS_NOT_FOUND,
    build_response,
    send_response,
    format_date,
)
from .mime_types import get_mime_type, DEFAULT_MIME_TYPE

__all__ = [
    "ParsedRequest",
    "parse_request_line",
    "MAX_METHOD_LENGTH",
    "MAX_PATH_LENGTH",
    "STATUS_OK",
    "STATUS_NOT_FOUND",
    "build_response",
    "send_response",
    "format_date",
    "get_mime_type",
    "DEFAULT_MIME_TYPE",
]
