"""
=============================================================================
RESPONSE SERIALIZATION
=============================================================================

Every response this server sends has the same shape, in this exact order:

    HTTP/1.1 200 OK\\n                       ← status line
    Date: Thu Oct 16 18:01:02 2026\\n        ← local time, asctime() format
    Connection: close\\n                     ← always; one request per connection
    Content-Length: 512\\n                   ← exact number of body bytes
    Content-Type: text/html\\n
    \\n                                      ← blank line ends the headers
    <!DOCTYPE html>...                      ← body, byte-for-byte

=============================================================================
BARE \\n LINE ENDINGS
=============================================================================

HTTP/1.1 says header lines end with \\r\\n. This server ends them with a bare
\\n. Every mainstream client tolerates it, and changing it would change the
bytes on the wire, so it stays.

=============================================================================
THE RESPONSE BUFFER
=============================================================================

The complete response (headers + body) must fit in RESPONSE_BUFFER_SIZE
(256 KiB). That is a hard ceiling:

    len(headers) + len(body) <= 262144   → sent with one sendall()
    len(headers) + len(body) >  262144   → ResponseTooLargeError, nothing sent

The body is copied as bytes, bounded by content_length. It is never run
through string formatting, so NUL bytes and binary files survive intact and
Content-Length always matches what follows the blank line.

=============================================================================
"""

import time
import logging
from typing import Optional

from ..config import RESPONSE_BUFFER_SIZE
from ..errors import ResponseTooLargeError


logger = logging.getLogger(__name__)


# Status lines used by this server (reason phrases are upper case on purpose)
STATUS_OK = "HTTP/1.1 200 OK"
STATUS_NOT_FOUND = "HTTP/1.1 404 NOT FOUND"


def format_date(timestamp: Optional[float] = None) -> str:
    """
    Format a timestamp for the Date header.

    Uses local time in the fixed asctime() layout, which does not depend on
    the process locale:

        Thu Oct 16 18:01:02 2026

    Args:
        timestamp: Seconds since the epoch. Defaults to now.
    """
    return time.asctime(time.localtime(timestamp))


def build_response(
    status_line: str,
    content_type: str,
    body: bytes,
    content_length: Optional[int] = None,
    date: Optional[str] = None,
) -> bytes:
    """
    Serialize a complete response into one buffer.

    Args:
        status_line: e.g. "HTTP/1.1 200 OK".
        content_type: MIME type for the Content-Type header.
        body: Body bytes.
        content_length: Number of body bytes to send. Defaults to len(body);
                        a larger value is clamped to len(body).
        date: Pre-formatted Date header value. Defaults to now.

    Returns:
        The response bytes, ready for sendall().

    Raises:
        ResponseTooLargeError: If the response exceeds RESPONSE_BUFFER_SIZE.
    """
    if content_length is None or content_length > len(body):
        content_length = len(body)
    payload = bytes(body[:content_length])

    header = (
        f"{status_line}\n"
        f"Date: {date if date is not None else format_date()}\n"
        f"Connection: close\n"
        f"Content-Length: {content_length}\n"
        f"Content-Type: {content_type}\n"
        f"\n"
    ).encode("latin-1")

    total = len(header) + len(payload)
    if total > RESPONSE_BUFFER_SIZE:
        raise ResponseTooLargeError(total, RESPONSE_BUFFER_SIZE)

    return header + payload


def send_response(
    connection,
    status_line: str,
    content_type: str,
    body: bytes,
    content_length: Optional[int] = None,
) -> Optional[int]:
    """
    Build a response and write it to a connection.

    Args:
        connection: A core.Connection (anything with send(bytes)).
        status_line: e.g. "HTTP/1.1 404 NOT FOUND".
        content_type: MIME type of the body.
        body: Body bytes.
        content_length: Number of body bytes (defaults to len(body)).

    Returns:
        Number of bytes written, or None if nothing could be sent (response
        too large, or the write failed). The caller does not retry.
    """
    try:
        response = build_response(status_line, content_type, body, content_length)
    except ResponseTooLargeError as e:
        logger.error(f"[{connection.id}] {e}")
        return None

    sent = connection.send(response)
    if sent is not None:
        logger.debug(f"[{connection.id}] {status_line}: sent {sent} bytes")
    return sent
