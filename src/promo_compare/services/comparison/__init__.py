"""Comparison service module.

Orchestrates cache, keyword expansion, promotion search, matching and
aggregation for one shopping list.
"""

from promo_compare.services.comparison.exceptions import (
    ComparisonServiceError,
    NoValidItemsError,
)
from promo_compare.services.comparison.service import ComparisonService, clean_items


__all__ = [
    "ComparisonService",
    "ComparisonServiceError",
    "NoValidItemsError",
    "clean_items",
]
