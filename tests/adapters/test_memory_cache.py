"""Tests for the in-memory expiring cache."""

from commute_impact.adapters.cache import InMemoryCache, NullCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_entry_expires_after_ttl():
    clock = FakeClock()
    cache = InMemoryCache(default_ttl_seconds=60, clock=clock)
    cache.set("route", "value")

    clock.advance(59)
    assert cache.get("route") == "value"

    clock.advance(1)
    assert cache.get("route") is None
    assert cache.size() == 0


def test_per_entry_ttl_overrides_default():
    clock = FakeClock()
    cache = InMemoryCache(default_ttl_seconds=3600, clock=clock)
    cache.set("short", 1, ttl=10)
    cache.set("long", 2)

    clock.advance(11)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_no_ttl_never_expires():
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    cache.set("k", "v")

    clock.advance(10**9)
    assert cache.get("k") == "v"


def test_none_is_not_stored():
    cache = InMemoryCache()
    cache.set("missing", None)

    assert cache.size() == 0


def test_oldest_entry_is_evicted_when_full():
    cache = InMemoryCache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert cache.stats()["evicted"] == 1


def test_refreshing_a_key_does_not_evict():
    cache = InMemoryCache(max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)

    assert cache.get("a") == 10
    assert cache.get("b") == 2


def test_expired_entries_are_dropped_before_live_ones():
    clock = FakeClock()
    cache = InMemoryCache(max_size=2, clock=clock)
    cache.set("live", 1)
    cache.set("stale", 2, ttl=5)

    clock.advance(10)
    cache.set("new", 3)

    assert cache.get("live") == 1
    assert cache.get("new") == 3
    assert cache.stats()["evicted"] == 0


def test_purge_expired():
    clock = FakeClock()
    cache = InMemoryCache(default_ttl_seconds=5, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl=60)

    clock.advance(6)

    assert cache.purge_expired() == 1
    assert cache.size() == 1


def test_clear_returns_dropped_count_and_resets_stats():
    cache = InMemoryCache()
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")

    assert cache.clear() == 2
    assert cache.size() == 0
    assert cache.stats()["hits"] == 0


def test_stats_track_hits_and_misses():
    cache = InMemoryCache(name="geocode")
    cache.set("a", 1)
    cache.get("a")
    cache.get("b")

    stats = cache.stats()
    assert stats["name"] == "geocode"
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate_percent"] == 50.0


def test_null_cache_stores_nothing():
    cache = NullCache()
    cache.set("a", 1)

    assert cache.get("a") is None
    assert cache.size() == 0
    assert cache.clear() == 0
