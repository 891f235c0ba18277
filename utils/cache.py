"""In-memory response cache with per-entry TTL.

Entries live in named namespaces (``posts``, ``random``, ``autocomplete``) and
are evicted lazily on read. ``sweep()`` removes every expired entry and is
meant to be called periodically.
"""
import time
from typing import Any, Dict, Optional, Tuple


class ResponseCache:

    """Namespaced key/value store where each entry carries its own TTL."""

    def __init__(self, default_ttl: float = 60.0, clock=time.time):
        """Initialize the cache.

        Args:
            default_ttl: TTL in seconds used when ``set`` is not given one
            clock: Callable returning the current time in seconds

        """
        self.default_ttl = default_ttl
        self.clock = clock
        # namespace -> key -> (value, stored_at, ttl)
        self._namespaces: Dict[str, Dict[str, Tuple[Any, float, float]]] = {}

    def _namespace(self, name: str) -> Dict[str, Tuple[Any, float, float]]:
        return self._namespaces.setdefault(name, {})

    def set(self, namespace: str, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``namespace/key`` for ``ttl`` seconds."""
        ttl = self.default_ttl if ttl is None else ttl
        self._namespace(namespace)[key] = (value, self.clock(), ttl)

    def get(self, namespace: str, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        entries = self._namespace(namespace)
        item = entries.get(key)
        if item is None:
            return None

        value, stored_at, ttl = item
        if self.clock() - stored_at > ttl:
            del entries[key]
            return None

        return value

    def sweep(self) -> int:
        """Remove expired entries from every namespace.

        Returns:
            Number of entries removed

        """
        now = self.clock()
        removed = 0
        for entries in self._namespaces.values():
            expired = [
                key for key, (_, stored_at, ttl) in entries.items()
                if now - stored_at > ttl
            ]
            for key in expired:
                del entries[key]
            removed += len(expired)
        return removed

    def stats(self) -> Dict[str, int]:
        """Entry count per namespace (expired entries included until swept)."""
        return {name: len(entries) for name, entries in self._namespaces.items()}

    def clear(self) -> None:
        self._namespaces.clear()
