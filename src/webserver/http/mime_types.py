"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps a file name to the value of the Content-Type header.

The browser uses Content-Type, not the URL, to decide what it received:

    Content-Type: text/html     → render as a page
    Content-Type: text/css      → apply as a stylesheet
    Content-Type: image/png     → decode as an image

The lookup is by extension only, case-insensitive:

    "index.html"        → text/html
    "LOGO.PNG"          → image/png
    "archive.unknown"   → application/octet-stream   (the default)
    "Makefile"          → application/octet-stream   (no extension)

Types are returned bare, without a charset parameter; the files are
served byte-for-byte and the server does not claim an encoding for them.

=============================================================================
"""

from pathlib import Path


# Extension (lowercase, with dot) → MIME type
MIME_TYPES = {
    # Text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".txt": "text/plain",
    ".xml": "application/xml",
    ".csv": "text/csv",
    ".md": "text/markdown",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".bmp": "image/bmp",

    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # Audio / video
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # Documents and archives
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
    ".wasm": "application/wasm",
}

# "I don't know what this is, treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str | Path) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or bare file name.

    Returns:
        The MIME type, or DEFAULT_MIME_TYPE for unknown/missing extensions.

    Examples:
        >>> get_mime_type("./serverroot/index.html")
        'text/html'

        >>> get_mime_type("photo.JPG")
        'image/jpeg'

        >>> get_mime_type("data.xyz")
        'application/octet-stream'
    """
    extension = Path(path).suffix.lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
