"""
Tests for the TTL cache, driven by a fake clock.
"""
from dishdisplay.services.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_hit_then_expiry():
    clock = FakeClock()
    cache = TTLCache(default_ttl=10, clock=clock)
    cache.set("k", "v")

    clock.now += 9
    assert cache.get("k") == "v"

    clock.now += 1
    assert cache.get("k") is None
    assert cache.stats.hits == 1
    assert cache.stats.misses == 1


def test_per_item_ttl():
    clock = FakeClock()
    cache = TTLCache(default_ttl=10, clock=clock)
    cache.set("short", 1, ttl=1)
    cache.set("long", 2)
    clock.now += 5
    assert cache.get("short") is None
    assert cache.get("long") == 2
    assert len(cache) == 1


def test_invalidate_and_prefix():
    cache = TTLCache(default_ttl=60, clock=FakeClock())
    cache.set("leaderboard:1:a", 1)
    cache.set("leaderboard:1:b", 2)
    cache.set("other", 3)

    assert cache.invalidate("other") is True
    assert cache.invalidate("other") is False
    assert cache.invalidate_prefix("leaderboard:") == 2
    assert cache.get("leaderboard:1:a") is None
    assert cache.stats.invalidations == 3


def test_clear():
    cache = TTLCache(default_ttl=60, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0
    assert cache.stats.sets == 2


def test_set_sweeps_expired_items():
    clock = FakeClock()
    cache = TTLCache(default_ttl=10, clock=clock)
    cache.set("leaderboard:1:a@x.com", 1)
    cache.set("leaderboard:1:b@x.com", 2)

    clock.now += 10
    cache.set("leaderboard:1:c@x.com", 3)

    assert cache.stats.evictions == 2
    assert cache.invalidate("leaderboard:1:a@x.com") is False
    assert len(cache) == 1
