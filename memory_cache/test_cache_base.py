"""
Pytest tests for memory_cache/cache_base.py (MemoryCache).

Run from the repo root:
    pytest memory_cache/test_cache_base.py -v
"""

import threading

import pytest

from memory_cache import MemoryCache


def test_fetch_computes_once_then_hits(clock):
    cache = MemoryCache(clock=clock)
    calls = []

    def compute():
        calls.append(1)
        return "v1"

    assert cache.fetch("k", 60, compute) == "v1"
    assert cache.fetch("k", 60, compute) == "v1"
    assert len(calls) == 1
    assert cache.stats.hit == 1
    assert cache.stats.miss == 1
    assert cache.stats.write == 1


def test_ttl_boundary(clock):
    """Live for t <= now < t+ttl, recomputed from t+ttl on."""
    cache = MemoryCache(clock=clock)
    cache.write("k", "old", 10)

    clock.advance(9.999)
    assert cache.fetch("k", 10, lambda: "new") == "old"

    clock.advance(0.001)
    assert cache.fetch("k", 10, lambda: "new") == "new"


def test_write_overwrites_live_entry(clock):
    cache = MemoryCache(clock=clock)
    cache.fetch("k", 60, lambda: "a")
    assert cache.write("k", "b", 60) == "b"
    assert cache.get("k") == "b"


def test_failed_compute_stores_nothing(clock):
    cache = MemoryCache(clock=clock)

    def boom():
        raise RuntimeError("network down")

    with pytest.raises(RuntimeError, match="network down"):
        cache.fetch("k", 60, boom)
    assert "k" not in cache
    assert len(cache) == 0
    assert cache.fetch("k", 60, lambda: "ok") == "ok"


def test_failed_compute_keeps_previous_expired_state(clock):
    cache = MemoryCache(clock=clock)
    cache.write("k", "old", 5)
    clock.advance(5)

    def bad():
        raise ValueError("bad")

    with pytest.raises(ValueError):
        cache.fetch("k", 5, bad)
    assert cache.get("k") is None


def test_get_drops_expired_entry(clock):
    cache = MemoryCache(clock=clock)
    cache.write(("owner", "repo", 7), "url", 50)
    assert cache.get(("owner", "repo", 7)) == "url"

    clock.advance(50)
    assert cache.get(("owner", "repo", 7)) is None
    assert len(cache) == 0


def test_zero_ttl_is_never_returned(clock):
    cache = MemoryCache(clock=clock)
    cache.write("k", "v", 0)
    assert cache.get("k") is None


def test_cleanup_only_evicts_expired(clock):
    cache = MemoryCache(clock=clock)
    cache.write("short", 1, 10)
    cache.write("long", 2, 100)
    cache.write("edge", 3, 30)

    clock.advance(30)
    assert cache.cleanup() == 2
    assert len(cache) == 1
    assert cache.get("long") == 2
    assert cache.stats.evict == 2


def test_delete_and_clear(clock):
    cache = MemoryCache(clock=clock)
    cache.write("a", 1, 10)
    cache.write("b", 2, 10)
    assert cache.delete("a") is True
    assert cache.delete("a") is False
    cache.clear()
    assert len(cache) == 0


def test_compute_runs_outside_lock(clock):
    """A slow compute for one key must not block reads of another key."""
    cache = MemoryCache(clock=clock)
    cache.write("other", "x", 60)
    started = threading.Event()
    release = threading.Event()
    seen = []

    def slow():
        started.set()
        release.wait(timeout=5)
        return "slow"

    th = threading.Thread(target=lambda: seen.append(cache.fetch("k", 60, slow)))
    th.start()
    assert started.wait(timeout=5)
    # Would deadlock if fetch() held the lock across compute().
    assert cache.get("other") == "x"
    release.set()
    th.join(timeout=5)
    assert seen == ["slow"]


def test_concurrent_misses_may_compute_twice_last_writer_wins(clock):
    cache = MemoryCache(clock=clock)
    barrier = threading.Barrier(2)
    results = []
    counter = iter(["first", "second"])
    mu = threading.Lock()

    def compute():
        barrier.wait(timeout=5)
        with mu:
            return next(counter)

    threads = [threading.Thread(target=lambda: results.append(cache.fetch("k", 60, compute))) for _ in range(2)]
    for th in threads:
        th.start()
    for th in threads:
        th.join(timeout=5)

    assert sorted(results) == ["first", "second"]
    assert cache.get("k") in ("first", "second")
    assert cache.stats.write == 2
