"""Pydantic schemas for promotions, match results and comparisons."""

from promo_compare.schemas.comparison import (
    CompareRequest,
    CompareResponse,
    ComparisonMetadata,
    ComparisonSummary,
    ProductComparison,
    StoreMatch,
    StoreTotal,
)
from promo_compare.schemas.enums import (
    Confidence,
    MatchingMode,
    MatchQuality,
    MatchType,
    StoreName,
)
from promo_compare.schemas.matching import MatchCandidate, ProductMatchResult
from promo_compare.schemas.promotion import (
    PromotionDiagnostics,
    PromotionRecord,
    StoreDiagnostics,
)


__all__ = [
    "CompareRequest",
    "CompareResponse",
    "ComparisonMetadata",
    "ComparisonSummary",
    "Confidence",
    "MatchCandidate",
    "MatchQuality",
    "MatchType",
    "MatchingMode",
    "ProductComparison",
    "ProductMatchResult",
    "PromotionDiagnostics",
    "PromotionRecord",
    "StoreDiagnostics",
    "StoreMatch",
    "StoreName",
    "StoreTotal",
]
