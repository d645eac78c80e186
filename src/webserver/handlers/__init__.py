"""
Request handlers.

    StaticResponder   resource files (200) and the system 404 page
"""

from .static import StaticResponder

__all__ = ["StaticResponder"]
