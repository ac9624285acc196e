"""Constants for basket price aggregation.

Contains:
- Cent rounding
- Valid price range (prices outside it are treated as missing)
- Match quality thresholds
"""

from __future__ import annotations

from decimal import Decimal
from typing import Final

from promo_compare.services.matching.constants import (
    FAIR_SIMILARITY,
    HIGH_CONFIDENCE_SIMILARITY,
)


# =============================================================================
# Money
# =============================================================================

CENT: Final[Decimal] = Decimal("0.01")
ZERO: Final[Decimal] = Decimal("0.00")
HUNDRED: Final[Decimal] = Decimal(100)

MIN_VALID_PRICE: Final[Decimal] = Decimal("0.01")
MAX_VALID_PRICE: Final[Decimal] = Decimal(1000)


# =============================================================================
# Match Quality Thresholds
# =============================================================================
# Applied to the best similarity observed for a product; defaults for the
# values configured under ``matching``

EXCELLENT_SIMILARITY: Final[float] = HIGH_CONFIDENCE_SIMILARITY
FAIR_QUALITY_SIMILARITY: Final[float] = FAIR_SIMILARITY


# =============================================================================
# Analysis
# =============================================================================

ANALYSIS_MAX_PRODUCTS: Final[int] = 5
