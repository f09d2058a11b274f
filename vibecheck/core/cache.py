"""Process-lifetime cache for reference data lookups.

The CWE catalog is append-only and small, so entries never expire and are
never evicted. A long-running host that reuses this process should put a
size or TTL bound in front of it.
"""

from typing import Any


class LookupCache:
    """Unbounded key/value cache with hit/miss accounting.

    Only successful lookups are stored; callers decide what is cacheable.
    Owned by a single event loop, so no locking.
    """

    def __init__(self) -> None:
        self._cache: dict[str, Any] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> tuple[bool, Any]:
        """Get a value from the cache.

        Args:
            key: Cache key

        Returns:
            Tuple of (found, value). If found is False, value is None.
        """
        if key in self._cache:
            self._hits += 1
            return True, self._cache[key]

        self._misses += 1
        return False, None

    def set(self, key: str, value: Any) -> None:
        """Store a value in the cache."""
        self._cache[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        """Clear all entries from the cache."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict[str, int | float]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, size, and hit rate
        """
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0
        return {
            "hits": self._hits,
            "misses": self._misses,
            "size": len(self._cache),
            "hit_rate_percent": round(hit_rate, 2),
        }
