"""Price aggregation module.

Computes per-store basket totals, savings and match quality from match
results, and renders a plain-text recommendation.
"""

from promo_compare.services.pricing.aggregator import (
    PriceAggregator,
    is_valid_price,
    match_quality,
    round_cents,
)
from promo_compare.services.pricing.analysis import build_analysis


__all__ = [
    "PriceAggregator",
    "build_analysis",
    "is_valid_price",
    "match_quality",
    "round_cents",
]
