from app.core.cache import CacheManager, cache_key


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_set_and_get_counts_hits_and_misses():
    cache = CacheManager(clock=FakeClock())
    cache.set("1:/a", {"success": True})
    assert cache.get("1:/a") == {"success": True}
    assert cache.get("1:/missing") is None
    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["size"] == 1


def test_expired_entries_are_dropped():
    clock = FakeClock()
    cache = CacheManager(default_ttl=10, clock=clock)
    cache.set("k", {"v": 1})
    clock.now += 11
    assert cache.get("k") is None
    assert "k" not in cache


def test_memory_accounting():
    cache = CacheManager(clock=FakeClock())
    data = {"v": "abc"}
    cache.set("k", data)
    assert cache.stats()["memory_usage"] == CacheManager.estimate_size(data)
    cache.set("k", data)
    assert cache.stats()["memory_usage"] == CacheManager.estimate_size(data)
    cache.delete("k")
    assert cache.stats()["memory_usage"] == 0


def test_lru_eviction_keeps_recently_used():
    clock = FakeClock()
    cache = CacheManager(max_size=5, clock=clock)
    for i in range(5):
        clock.now += 1
        cache.set(f"k{i}", i)
    clock.now += 1
    cache.get("k0")
    clock.now += 1
    cache.set("k5", 5)
    assert "k0" in cache
    assert "k1" not in cache
    assert len(cache) == 5
    assert cache.stats()["evictions"] == 1


def test_memory_limit_evicts():
    cache = CacheManager(max_size=10, max_memory=100, clock=FakeClock())
    cache.set("a", "x" * 30)
    cache.set("b", "y" * 30)
    assert "a" not in cache
    assert "b" in cache


def test_delete_pattern_is_anchored():
    cache = CacheManager(clock=FakeClock())
    cache.set("1:/api/divination/history", 1)
    cache.set("1:/api/divination/stats", 2)
    cache.set("11:/api/divination/history", 3)
    assert cache.delete_pattern("1:*") == 2
    assert "11:/api/divination/history" in cache


def test_cache_key():
    assert cache_key(3, "/api/divination/history", "page=2") == "3:/api/divination/history?page=2"
    assert cache_key(None, "/api") == "anonymous:/api"


def test_cleanup_drops_expired_entries():
    clock = FakeClock()
    cache = CacheManager(default_ttl=10, clock=clock)
    cache.set("old", {"v": 1})
    clock.now += 5
    cache.set("fresh", {"v": 2})
    clock.now += 6
    cache.cleanup()
    assert "old" not in cache
    assert "fresh" in cache
    assert cache.stats()["evictions"] == 1
