"""In-memory cache of pruned document content."""

from __future__ import annotations

import hashlib
from typing import Dict, Optional, Tuple

CacheKey = Tuple[str, str]


def _digest(text: str) -> str:
    # surrogatepass: JSON-decoded arguments may carry lone surrogates.
    return hashlib.sha256(text.encode("utf-8", "surrogatepass")).hexdigest()


def make_cache_key(content: str, task: str) -> CacheKey:
    """Return the composite ``(content digest, task digest)`` key."""
    return (_digest(content), _digest(task))


class FilterCache:
    """Stores content-filter results keyed by content and task digests.

    Entries live as long as the owning cache instance; there is no expiry or
    eviction. Because the key covers the full content, an edited file maps to a
    new key rather than a stale entry.
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, str] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: CacheKey) -> Optional[str]:
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def store(self, key: CacheKey, value: str) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CacheKey", "FilterCache", "make_cache_key"]
