"""Cache adapters for the mapping lookups (CachePort).

- InMemoryCache: expiring, size-bounded, thread-safe
- NullCache: stores nothing
"""

from .memory_cache import InMemoryCache
from .null_cache import NullCache

__all__ = ["InMemoryCache", "NullCache"]
