"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

The server looks at exactly one thing in a request: the first two
whitespace-separated tokens.

    GET /profile/alice HTTP/1.1\r\n         ← only this line matters
    Host: localhost:3490\r\n                ← ignored
    User-Agent: curl/8.0\r\n                ← ignored
    \r\n
    (body)                                  ← ignored

    method = "GET"
    path   = "/profile/alice"

There is no header map and no body extraction. The version token, if any,
is never looked at.

=============================================================================
RAW REQUEST RULES
=============================================================================

1. The raw request is whatever ONE recv() returned. Nothing is reassembled
   across packets.

2. It is treated as NUL-terminated text: a \\0 byte ends the text that is
   parsed, everything after it is invisible to the parser.

3. Tokens are split on any whitespace (space, tab, CR, LF), so the tokens
   may even come from different lines:  b"GET\\r\\n/x" → ("GET", "/x").

4. Bounded tokens:
       method  at most  9 characters  (MAX_METHOD_LENGTH)
       path    at most 106 characters (MAX_PATH_LENGTH)
   Anything longer is a RequestParseError.

5. Missing tokens become empty strings:
       b""        → method="",    path=""
       b"GET"     → method="GET", path=""
   The router treats an empty method or path as "send 404".

=============================================================================
"""

from dataclasses import dataclass

from ..errors import RequestParseError


MAX_METHOD_LENGTH = 9
MAX_PATH_LENGTH = 106


@dataclass(frozen=True)
class ParsedRequest:
    """
    The method and path of one request.

    Attributes:
        method: HTTP method token as received ("GET", "POST", ...). Case is
                preserved; "get" is not "GET".
        path:   Request target token as received, no decoding or
                normalization.
    """

    method: str
    path: str

    @property
    def is_empty(self) -> bool:
        """True when either token is missing."""
        return not self.method or not self.path


def request_text(raw: bytes) -> str:
    """
    Decode the raw request up to the first NUL byte.

    latin-1 maps every byte to one character, so decoding never fails and
    token lengths are byte lengths.
    """
    return raw.split(b"\0", 1)[0].decode("latin-1")


def parse_request_line(raw: bytes) -> ParsedRequest:
    """
    Extract method and path from a raw request.

    Args:
        raw: Bytes from a single recv().

    Returns:
        ParsedRequest, with empty strings for missing tokens.

    Raises:
        RequestParseError: If the method or path token is too long.

    Examples:
        >>> parse_request_line(b"GET /index.html HTTP/1.1\\r\\n\\r\\n")
        ParsedRequest(method='GET', path='/index.html')

        >>> parse_request_line(b"")
        ParsedRequest(method='', path='')
    """
    tokens = request_text(raw).split(None, 2)

    method = tokens[0] if len(tokens) > 0 else ""
    path = tokens[1] if len(tokens) > 1 else ""

    if len(method) > MAX_METHOD_LENGTH:
        raise RequestParseError(f"Method token too long ({len(method)} chars)")

    if len(path) > MAX_PATH_LENGTH:
        raise RequestParseError(f"Path token too long ({len(path)} chars)")

    return ParsedRequest(method=method, path=path)
