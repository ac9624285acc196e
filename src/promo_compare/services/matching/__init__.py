"""Match engine module.

Classifies promotion records against product queries into ranked,
per-store matches.
"""

from promo_compare.services.matching.engine import MatchEngine
from promo_compare.services.matching.exceptions import (
    CandidatePoolTooLargeError,
    MatchingError,
)


__all__ = [
    "CandidatePoolTooLargeError",
    "MatchEngine",
    "MatchingError",
]
