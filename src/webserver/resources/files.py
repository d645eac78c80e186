"""
=============================================================================
FILE LOADING
=============================================================================

Reads a resource file into memory in one go.

The loader knows nothing about HTTP. It answers one question: "give me the
bytes of this path", and it answers it with either a FilePayload or a
ResourceNotFound exception:

    load_file("serverroot/index.html")   →  FilePayload(data=b"<!DOCTYPE...", size=512)
    load_file("serverroot/missing.html") →  raises ResourceNotFound

The caller decides what "not found" means. The static responder turns it
into a 404 for the one connection that asked; it never stops the server.

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..errors import ResourceNotFound


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilePayload:
    """
    A loaded file's bytes plus their length.

    Attributes:
        data: Raw file content. May contain any byte, including NUL.
        size: Number of bytes in data.
    """

    data: bytes
    size: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "FilePayload":
        return cls(data=data, size=len(data))


def load_file(path: str | Path) -> FilePayload:
    """
    Load a file from disk.

    Args:
        path: Filesystem path to read.

    Returns:
        FilePayload with the complete file content.

    Raises:
        ResourceNotFound: If the path does not exist, is not a regular file,
                          or cannot be read.
    """
    path = Path(path)

    if not path.is_file():
        raise ResourceNotFound(str(path))

    try:
        data = path.read_bytes()
    except OSError as e:
        # Vanished between the check and the read, or not readable
        logger.warning(f"Cannot read {path}: {e}")
        raise ResourceNotFound(str(path), reason=str(e)) from e

    return FilePayload.from_bytes(data)
