"""Tests for the TTL cache."""

import threading

import pytest
from clipping.intelligence.cache import TTLCache


class TestGetSet:
    def test_miss_returns_none(self, cache):
        assert cache.get("missing") is None

    def test_set_then_get(self, cache):
        cache.set("scrape:TCU", "items")
        assert cache.get("scrape:TCU") == "items"

    def test_overwrite_replaces_value(self, cache):
        cache.set("k", "old")
        cache.set("k", "new")
        assert cache.get("k") == "new"
        assert cache.size == 1

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            TTLCache(max_size=0)


class TestExpiry:
    def test_fresh_entry_is_a_hit(self, cache, clock):
        cache.set("k", "v")
        clock.advance(59.9)
        assert cache.get("k") == "v"

    def test_entry_expires_at_ttl(self, cache, clock):
        cache.set("k", "v")
        clock.advance(60)
        assert cache.get("k") is None

    def test_expired_entry_is_not_evicted_by_read(self, cache, clock):
        cache.set("k", "v")
        clock.advance(120)
        cache.get("k")
        # Still counted until capacity eviction or clear
        assert cache.size == 1


class TestEviction:
    def test_oldest_entry_evicted_when_over_capacity(self, cache, clock):
        for key in ("a", "b", "c"):
            cache.set(key, key)
            clock.advance(1)
        cache.set("d", "d")

        assert cache.size == 3
        assert cache.get("a") is None
        assert cache.get("b") == "b"
        assert cache.get("d") == "d"

    def test_rewritten_entry_counts_as_new(self, clock):
        cache = TTLCache(ttl=60, max_size=2, clock=clock)
        cache.set("a", 1)
        clock.advance(1)
        cache.set("b", 2)
        clock.advance(1)
        cache.set("a", 3)
        clock.advance(1)
        cache.set("c", 4)

        assert cache.get("b") is None
        assert cache.get("a") == 3
        assert cache.get("c") == 4

    def test_size_never_exceeds_max(self, cache, clock):
        for i in range(20):
            cache.set(f"k{i}", i)
            clock.advance(0.5)
            assert cache.size <= cache.max_size

    def test_concurrent_sets_respect_capacity(self):
        cache = TTLCache(ttl=60, max_size=10)

        def writer(n):
            for i in range(200):
                cache.set(f"{n}-{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cache.size <= 10


class TestClearAndStats:
    def test_clear_returns_prior_size(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.clear() == 2
        assert cache.size == 0
        assert cache.get("a") is None

    def test_stats(self, cache):
        cache.set("a", 1)
        assert cache.stats() == {"entries": 1, "max_size": 3}
