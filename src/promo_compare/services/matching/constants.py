"""Constants for match scoring.

Contains:
- Similarity bands for each match tier
- Confidence and qualifying thresholds (shared with the price aggregator)
- Fuzzy-tier floors per matching mode
- Candidate pool bound
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from promo_compare.schemas.enums import MatchingMode


# =============================================================================
# Tier Similarity Bands
# =============================================================================
# exact (1.0) > contains (0.70..0.95) > semantic (0..0.65)

EXACT_SIMILARITY: Final[float] = 1.0
CONTAINS_BASE_SIMILARITY: Final[float] = 0.70
CONTAINS_RATIO_WEIGHT: Final[float] = 0.25
SEMANTIC_MAX_SIMILARITY: Final[float] = 0.65
SIMILARITY_PRECISION: Final[int] = 4


# =============================================================================
# Thresholds
# =============================================================================

HIGH_CONFIDENCE_SIMILARITY: Final[float] = 0.7
QUALIFYING_SIMILARITY: Final[float] = 0.4  # also the medium-confidence floor
GOOD_SIMILARITY: Final[float] = 0.5
FAIR_SIMILARITY: Final[float] = 0.3

FUZZY_FLOORS: Final[Mapping[MatchingMode, float]] = MappingProxyType(
    {
        MatchingMode.STRICT: 0.7,
        MatchingMode.FLEXIBLE: FAIR_SIMILARITY,
        MatchingMode.BROAD: 0.2,
    }
)


# =============================================================================
# Limits
# =============================================================================

MAX_CANDIDATE_POOL: Final[int] = 1000
