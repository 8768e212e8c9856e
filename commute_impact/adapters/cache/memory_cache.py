"""In-process expiring cache.

Entries are kept in insertion order. Lifetimes are measured on an
injectable monotonic clock so expiry can be tested without sleeping.
When the cache is full the oldest entry is dropped first.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class _Entry(Generic[T]):
    value: T
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


@dataclass
class InMemoryCache(Generic[T]):
    """Thread-safe cache with per-entry lifetimes.

    Attributes:
        name: Cache name used in logs and stats
        default_ttl_seconds: Lifetime applied when set() gets no ttl (None = forever)
        max_size: Entry limit before the oldest entry is dropped (None = unbounded)
        clock: Monotonic time source

    Example:
        directions = InMemoryCache[RouteInfo](name="directions", default_ttl_seconds=3600)
        directions.set("t nagar|guindy", route)
    """

    name: str = "cache"
    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    clock: Clock = field(default=time.monotonic, repr=False)

    _entries: OrderedDict[str, _Entry[T]] = field(
        default_factory=OrderedDict, repr=False
    )
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _counters: Dict[str, int] = field(
        default_factory=lambda: dict.fromkeys(
            ("hits", "misses", "expired", "evicted"), 0
        ),
        repr=False,
    )
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.is_live(self.clock()):
                del self._entries[key]
                self._counters["expired"] += 1
                entry = None

            if entry is None:
                self._counters["misses"] += 1
                return None

            self._counters["hits"] += 1
            return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        if value is None:
            return

        lifetime = self.default_ttl_seconds if ttl is None else ttl
        expires_at = float("inf") if lifetime is None else self.clock() + lifetime

        with self._lock:
            if key in self._entries:
                # Refreshing a key keeps its position in the eviction order
                self._entries[key] = _Entry(value, expires_at)
                return

            if self.max_size is not None and len(self._entries) >= self.max_size:
                self.purge_expired()
                while self._entries and len(self._entries) >= self.max_size:
                    oldest, _ = self._entries.popitem(last=False)
                    self._counters["evicted"] += 1
                    self._logger.debug("Evicted oldest entry", extra={"key": oldest})

            self._entries[key] = _Entry(value, expires_at)

    def purge_expired(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries dropped.
        """
        with self._lock:
            now = self.clock()
            stale = [k for k, e in self._entries.items() if not e.is_live(now)]
            for key in stale:
                del self._entries[key]
            self._counters["expired"] += len(stale)
            return len(stale)

    def clear(self) -> int:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            for counter in self._counters:
                self._counters[counter] = 0
        self._logger.info("Cache cleared", extra={"cache": self.name, "dropped": dropped})
        return dropped

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Entry count plus hit, miss, expiry and eviction counters."""
        with self._lock:
            lookups = self._counters["hits"] + self._counters["misses"]
            return {
                "name": self.name,
                "size": len(self._entries),
                **self._counters,
                "hit_rate_percent": (
                    round(self._counters["hits"] / lookups * 100, 1) if lookups else 0.0
                ),
            }
