"""
Resource collaborators: the file loader and the path → payload cache.
"""

from .files import FilePayload, load_file
from .cache import Cache, EvictionPolicy

__all__ = ["FilePayload", "load_file", "Cache", "EvictionPolicy"]
