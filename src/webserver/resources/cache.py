"""
=============================================================================
RESOURCE CACHE
=============================================================================

A bounded mapping from file path to FilePayload.

The server creates exactly one cache at startup (capacity 10, policy 0).
By default the request path never touches it; set use_cache=True in
ServerConfig to have the static responder read through it.

=============================================================================
EVICTION POLICIES
=============================================================================

When a put() would exceed capacity, one entry is evicted first.

    POLICY 0: LRU (least recently used)
    ───────────────────────────────────
    get() and put() both move the entry to the "most recent" end.
    The entry untouched for the longest time is evicted.

        put(a) put(b) put(c)     order: a b c
        get(a)                   order: b c a
        put(d)   (capacity 3)    evicts b → c a d

    POLICY 1: FIFO (first in, first out)
    ────────────────────────────────────
    Only insertion order matters. get() does not refresh anything.

        put(a) put(b) put(c)     order: a b c
        get(a)                   order: a b c
        put(d)   (capacity 3)    evicts a → b c d

Both are built on OrderedDict, which keeps insertion order and can move
a key to the end in O(1).

=============================================================================
"""

import logging
from collections import OrderedDict
from enum import IntEnum
from typing import Optional

from .files import FilePayload


logger = logging.getLogger(__name__)


class EvictionPolicy(IntEnum):
    """Eviction policy selector, as passed to Cache(capacity, policy)."""
    LRU = 0
    FIFO = 1


class Cache:
    """
    Capacity-bounded path → FilePayload store.

    Usage:
        cache = Cache(10)
        cache.put("./serverroot/index.html", payload)
        payload = cache.get("./serverroot/index.html")   # None on miss
    """

    def __init__(self, capacity: int, policy: int = EvictionPolicy.LRU):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}")
        try:
            self.policy = EvictionPolicy(policy)
        except ValueError:
            raise ValueError(f"Unknown eviction policy: {policy}") from None

        self.capacity = capacity
        self._entries: "OrderedDict[str, FilePayload]" = OrderedDict()

        # Hit/miss counters, useful when deciding whether to enable use_cache
        self.hits = 0
        self.misses = 0

    def get(self, path: str) -> Optional[FilePayload]:
        """Return the cached payload for path, or None."""
        payload = self._entries.get(path)
        if payload is None:
            self.misses += 1
            return None

        self.hits += 1
        if self.policy == EvictionPolicy.LRU:
            self._entries.move_to_end(path)
        return payload

    def put(self, path: str, payload: FilePayload) -> None:
        """
        Store payload under path, evicting one entry if the cache is full.

        Replacing an existing key never evicts anything.
        """
        if path in self._entries:
            self._entries[path] = payload
            if self.policy == EvictionPolicy.LRU:
                self._entries.move_to_end(path)
            return

        if len(self._entries) >= self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted {evicted} from cache")

        self._entries[path] = payload

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __repr__(self) -> str:
        return (
            f"Cache(capacity={self.capacity}, policy={self.policy.name}, "
            f"entries={len(self._entries)})"
        )
