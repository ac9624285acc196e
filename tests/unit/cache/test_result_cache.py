"""Unit tests for ResultCache.

Tests cover:
- Get/set and TTL expiry
- LRU eviction at capacity
- Batch lookups
- Invalidation by key and pattern
- Cleanup sweep and statistics
- Concurrent access from several threads
"""

from __future__ import annotations

import re
import threading
import time

import pytest

from promo_compare.cache.result_cache import CacheEntry, ResultCache


pytestmark = pytest.mark.unit


class FakeClock:
    """Manually advanced time source."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResultCache[str]:
    """Small cache driven by the fake clock."""
    return ResultCache(max_entries=3, default_ttl=60, clock=clock)


# =============================================================================
# Entries
# =============================================================================


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_expires_strictly_after_ttl(self) -> None:
        """Should still be live exactly at the TTL boundary."""
        entry = CacheEntry(value="x", timestamp=10.0, ttl=5.0)

        assert not entry.is_expired(15.0)
        assert entry.is_expired(15.01)


# =============================================================================
# Get / Set
# =============================================================================


class TestGetSet:
    """Tests for get and set."""

    def test_get_returns_stored_value(self, cache: ResultCache[str]) -> None:
        """Should return what was set."""
        cache.set("a", "alpha")

        assert cache.get("a") == "alpha"

    def test_get_missing_returns_none(self, cache: ResultCache[str]) -> None:
        """Should return None for unknown keys."""
        assert cache.get("missing") is None

    def test_overwrite_replaces_value(self, cache: ResultCache[str]) -> None:
        """Should keep a single entry per key."""
        cache.set("a", "alpha")
        cache.set("a", "omega")

        assert cache.get("a") == "omega"
        assert len(cache) == 1

    def test_expired_entry_is_absent(
        self, cache: ResultCache[str], clock: FakeClock
    ) -> None:
        """Should treat entries past their TTL as missing and drop them."""
        cache.set("a", "alpha", ttl=10)
        clock.advance(11)

        assert cache.get("a") is None
        assert "a" not in cache
        assert len(cache) == 0

    def test_entry_live_until_ttl(
        self, cache: ResultCache[str], clock: FakeClock
    ) -> None:
        """Should serve the value up to the TTL."""
        cache.set("a", "alpha", ttl=10)
        clock.advance(10)

        assert cache.get("a") == "alpha"

    def test_default_ttl_applies(
        self, cache: ResultCache[str], clock: FakeClock
    ) -> None:
        """Should use default_ttl when no TTL is given."""
        cache.set("a", "alpha")
        clock.advance(61)

        assert cache.get("a") is None

    def test_expiry_with_real_clock(self) -> None:
        """Should expire against the monotonic clock."""
        cache: ResultCache[str] = ResultCache()
        cache.set("a", "alpha", ttl=0.05)

        time.sleep(0.1)

        assert cache.get("a") is None

    def test_negative_ttl_rejected(self, cache: ResultCache[str]) -> None:
        """Should raise ValueError for a negative TTL."""
        with pytest.raises(ValueError, match="ttl"):
            cache.set("a", "alpha", ttl=-1)

    def test_invalid_construction(self) -> None:
        """Should reject a zero capacity or negative default TTL."""
        with pytest.raises(ValueError, match="max_entries"):
            ResultCache(max_entries=0)
        with pytest.raises(ValueError, match="default_ttl"):
            ResultCache(default_ttl=-5)


# =============================================================================
# Eviction
# =============================================================================


class TestEviction:
    """Tests for LRU eviction."""

    def test_evicts_least_recently_inserted(self, cache: ResultCache[str]) -> None:
        """Should drop the oldest key when full."""
        for key in ("a", "b", "c", "d"):
            cache.set(key, key.upper())

        assert len(cache) == 3
        assert cache.get("a") is None
        assert cache.get("d") == "D"

    def test_access_refreshes_recency(self, cache: ResultCache[str]) -> None:
        """Should keep a recently read key over older untouched ones."""
        for key in ("a", "b", "c"):
            cache.set(key, key.upper())
        cache.get("a")

        cache.set("d", "D")

        assert "a" in cache
        assert "b" not in cache

    def test_overwrite_refreshes_recency(self, cache: ResultCache[str]) -> None:
        """Should treat an overwrite as a use."""
        for key in ("a", "b", "c"):
            cache.set(key, key.upper())
        cache.set("a", "A2")

        cache.set("d", "D")

        assert cache.get("a") == "A2"
        assert "b" not in cache

    def test_size_never_exceeds_capacity(self, cache: ResultCache[str]) -> None:
        """Should stay at max_entries under sustained inserts."""
        for i in range(50):
            cache.set(f"k{i}", str(i))
            assert len(cache) <= 3


# =============================================================================
# Batch Get
# =============================================================================


class TestBatchGet:
    """Tests for batch_get."""

    def test_returns_only_hits(
        self, cache: ResultCache[str], clock: FakeClock
    ) -> None:
        """Should omit missing and stale keys."""
        cache.set("fresh", "F", ttl=100)
        cache.set("stale", "S", ttl=5)
        clock.advance(10)

        found = cache.batch_get(["fresh", "stale", "missing"])

        assert found == {"fresh": "F"}

    def test_empty_keys(self, cache: ResultCache[str]) -> None:
        """Should return an empty mapping."""
        assert cache.batch_get([]) == {}


# =============================================================================
# Invalidation and Cleanup
# =============================================================================


class TestInvalidation:
    """Tests for invalidate, invalidate_pattern and clear."""

    def test_invalidate_reports_presence(self, cache: ResultCache[str]) -> None:
        """Should return True only when the key existed."""
        cache.set("a", "alpha")

        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False

    def test_invalidate_pattern(self) -> None:
        """Should remove every key matching the regex."""
        cache: ResultCache[str] = ResultCache()
        cache.set("promo:v1:flexible:lait", "1")
        cache.set("promo:v1:strict:lait", "2")
        cache.set("promo:v1:flexible:oeufs", "3")

        removed = cache.invalidate_pattern(r":lait$")

        assert removed == 2
        assert "promo:v1:flexible:oeufs" in cache

    def test_invalidate_compiled_pattern(self, cache: ResultCache[str]) -> None:
        """Should accept a precompiled pattern."""
        cache.set("promo:v1:broad:riz", "1")

        assert cache.invalidate_pattern(re.compile(r"^promo:v1:broad:")) == 1

    def test_clear(self, cache: ResultCache[str]) -> None:
        """Should drop every entry and report how many."""
        cache.set("a", "1")
        cache.set("b", "2")

        assert cache.clear() == 2
        assert len(cache) == 0


class TestCleanup:
    """Tests for cleanup."""

    def test_removes_only_expired(
        self, cache: ResultCache[str], clock: FakeClock
    ) -> None:
        """Should purge expired entries and keep live ones."""
        cache.set("short", "1", ttl=5)
        cache.set("long", "2", ttl=500)
        clock.advance(10)

        assert cache.cleanup() == 1
        assert len(cache) == 1
        assert cache.get("long") == "2"


class TestStats:
    """Tests for get_stats."""

    def test_counts_hits_misses_and_evictions(
        self, cache: ResultCache[str], clock: FakeClock
    ) -> None:
        """Should report counters and derived values."""
        for key in ("a", "b", "c", "d"):
            cache.set(key, key)
        cache.get("d")
        cache.get("d")
        cache.get("a")
        cache.set("e", "e", ttl=1)
        clock.advance(2)

        stats = cache.get_stats()

        assert stats["size"] == 3
        assert stats["max_entries"] == 3
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(0.6667)
        assert stats["evictions"] == 2
        assert stats["stale_entries"] == 1
        assert stats["entry_hits"] == 2

    def test_empty_cache_hit_rate(self, cache: ResultCache[str]) -> None:
        """Should report a zero hit rate without lookups."""
        assert cache.get_stats()["hit_rate"] == 0.0


class TestConcurrency:
    """Tests for access from several threads at once."""

    def test_mixed_operations_keep_cache_consistent(self) -> None:
        """Should stay bounded and count every lookup under contention."""
        cache: ResultCache[int] = ResultCache(max_entries=8, default_ttl=0.001)
        workers, rounds = 8, 300
        barrier = threading.Barrier(workers)
        errors: list[BaseException] = []
        lookups = [0] * workers
        oversize: list[int] = []

        def work(worker: int) -> None:
            try:
                barrier.wait()
                for i in range(rounds):
                    key = f"k{(worker * rounds + i) % 20}"
                    cache.set(key, i, ttl=60 if i % 3 else 0)
                    cache.get(key)
                    cache.batch_get([key, f"k{i % 20}", "missing"])
                    lookups[worker] += 4
                    if i % 50 == 0:
                        cache.cleanup()
                    size = len(cache)
                    if size > cache.max_entries:
                        oversize.append(size)
            except BaseException as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=work, args=(n,)) for n in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = cache.get_stats()
        assert errors == []
        assert oversize == []
        assert stats["size"] <= cache.max_entries
        assert stats["hits"] + stats["misses"] == sum(lookups)
