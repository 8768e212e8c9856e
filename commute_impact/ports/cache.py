"""Cache port - Expiring key/value store for mapping lookups.

Geocoding, directions and autocomplete responses are each kept in their
own cache with its own lifetime. Caches are built once per process by
the container and handed to the routing adapter; nothing holds them as
module-level state.
"""

from __future__ import annotations

from typing import Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for an expiring cache.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - Production
    - adapters/cache/null_cache.py (NullCache) - Testing
    """

    def get(self, key: str) -> Optional[T]:
        """Return the live value for a key, or None if absent or expired."""
        ...

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store a value.

        Args:
            key: Normalised lookup key.
            value: Value to keep; None is never stored.
            ttl: Lifetime in seconds, overriding the cache default.
        """
        ...

    def clear(self) -> int:
        """Drop every entry and return how many were dropped."""
        ...

    def size(self) -> int:
        """Number of entries currently held, expired ones included."""
        ...
