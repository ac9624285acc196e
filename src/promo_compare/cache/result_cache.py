"""Bounded in-process result cache with TTL expiry and LRU eviction.

One instance is created per process at startup and shared by every request
through dependency injection. All operations take a single lock; the cache
is small (``max_entries``) and each operation is at most linear in its size.

Entries are logically absent once ``now - timestamp > ttl`` even before the
periodic :meth:`ResultCache.cleanup` sweep physically removes them.
"""

from __future__ import annotations

import re
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from promo_compare.observability.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_TTL_SECONDS = 30 * 60


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """A cached value with its creation time, lifetime and hit counter."""

    value: T
    timestamp: float
    ttl: float
    hits: int = 0

    def is_expired(self, now: float) -> bool:
        """True once the entry has outlived its TTL."""
        return now - self.timestamp > self.ttl


class ResultCache(Generic[T]):
    """Thread-safe key/value cache.

    Usage:
        cache: ResultCache[ProductMatchResult] = ResultCache(max_entries=1000)
        cache.set("promo:v1:flexible:lait", result)
        cache.get("promo:v1:flexible:lait")
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Capacity; inserting a new key when full evicts the
                least recently used key.
            default_ttl: Lifetime in seconds applied when ``set`` gets no TTL.
            clock: Monotonic time source in seconds.
        """
        if max_entries < 1:
            msg = "max_entries must be at least 1"
            raise ValueError(msg)
        if default_ttl < 0:
            msg = "default_ttl must not be negative"
            raise ValueError(msg)
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def get(self, key: str) -> T | None:
        """Return the live value for ``key`` or ``None``.

        A hit marks the key most recently used and bumps its hit counter; a
        stale entry is deleted.
        """
        with self._lock:
            return self._lookup(key, self._clock())

    def set(self, key: str, value: T, ttl: float | None = None) -> None:
        """Insert or overwrite ``key``.

        Args:
            key: Cache key.
            value: Value to store.
            ttl: Lifetime in seconds; defaults to ``default_ttl``.

        Raises:
            ValueError: If ``ttl`` is negative.
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl < 0:
            msg = "ttl must not be negative"
            raise ValueError(msg)

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted least recently used cache entry", key=evicted)
            self._entries[key] = CacheEntry(
                value=value, timestamp=self._clock(), ttl=ttl
            )

    def batch_get(self, keys: Iterable[str]) -> dict[str, T]:
        """Look up several keys under one lock with a single timestamp.

        Returns:
            Mapping of the keys that hit to their values; misses are absent.
        """
        with self._lock:
            now = self._clock()
            found: dict[str, T] = {}
            for key in keys:
                value = self._lookup(key, now)
                if value is not None:
                    found[key] = value
            return found

    def invalidate(self, key: str) -> bool:
        """Remove ``key``; returns whether it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_pattern(self, pattern: str | re.Pattern[str]) -> int:
        """Remove every key matching the regular expression ``pattern``.

        Returns:
            Number of keys removed.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        with self._lock:
            doomed = [key for key in self._entries if regex.search(key)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug(
                "Invalidated cache entries by pattern",
                pattern=regex.pattern,
                count=len(doomed),
            )
        return len(doomed)

    def clear(self) -> int:
        """Remove everything; returns the number of entries dropped."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def cleanup(self) -> int:
        """Purge every entry past its TTL.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
            self._expirations += len(expired)
        return len(expired)

    def get_stats(self) -> dict[str, Any]:
        """Snapshot of size, capacity and counters."""
        with self._lock:
            now = self._clock()
            lookups = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "default_ttl_seconds": self.default_ttl,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / lookups, 4) if lookups else 0.0,
                "evictions": self._evictions,
                "expirations": self._expirations,
                "stale_entries": sum(
                    1 for e in self._entries.values() if e.is_expired(now)
                ),
                "entry_hits": sum(e.hits for e in self._entries.values()),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def _lookup(self, key: str, now: float) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(now):
            del self._entries[key]
            self._expirations += 1
            self._misses += 1
            return None
        entry.hits += 1
        self._hits += 1
        self._entries.move_to_end(key)
        return entry.value
