"""In-process caching layer.

This module provides the bounded TTL/LRU cache used to reuse match results
across requests.
"""

from promo_compare.cache.result_cache import CacheEntry, ResultCache


__all__ = [
    "CacheEntry",
    "ResultCache",
]
