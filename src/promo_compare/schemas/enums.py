"""Enumeration types shared across matching, pricing and the API."""

from __future__ import annotations

from enum import StrEnum


class StoreName(StrEnum):
    """Retailers whose flyers are compared.

    Declaration order is the store priority used to break ties between
    equally priced stores and to order per-store match groups.
    """

    WALMART = "Walmart"
    METRO = "Metro"
    SUPER_C = "Super C"
    IGA = "IGA"
    MAXI = "Maxi"
    PROVIGO = "Provigo"

    @property
    def priority(self) -> int:
        """Position in the tie-break order (lower wins)."""
        return list(StoreName).index(self)


class MatchType(StrEnum):
    """How a promotion matched a query, best tier first."""

    EXACT = "exact"
    CONTAINS = "contains"
    SEMANTIC = "semantic"
    FUZZY = "fuzzy"

    @property
    def rank(self) -> int:
        """Sort rank of the tier (0 is best)."""
        return list(MatchType).index(self)


class Confidence(StrEnum):
    """Coarse bucket of a similarity score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchQuality(StrEnum):
    """Overall quality of the best match found for a product."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class MatchingMode(StrEnum):
    """Matching strictness; controls the fuzzy-tier similarity floor."""

    STRICT = "strict"
    FLEXIBLE = "flexible"
    BROAD = "broad"
