"""Match results produced by the match engine and stored in the result cache."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from pydantic import Field

from promo_compare.schemas.base import DomainModel
from promo_compare.schemas.enums import Confidence, MatchType, StoreName


class MatchCandidate(DomainModel):
    """One promotion scored against one query."""

    matched_name: str = Field(
        ..., description="Product name of the matched promotion"
    )
    store: StoreName = Field(..., description="Retailer offering the promotion")
    price: Decimal = Field(..., gt=0, description="Sale price of the promotion")
    regular_price: Decimal | None = Field(
        default=None,
        description="Regular price of the promotion, when known",
    )
    similarity: float = Field(..., ge=0, le=1, description="Normalized match score")
    match_type: MatchType = Field(..., description="Tier that produced the match")
    confidence: Confidence = Field(..., description="Bucket derived from similarity")
    source_id: str | None = Field(
        default=None, description="Flyer the promotion came from"
    )


class ProductMatchResult(DomainModel):
    """All matches for one shopping list item, best first within each store."""

    product: str = Field(..., description="Original query string")
    matches: tuple[MatchCandidate, ...] = Field(default=())
    search_keywords: tuple[str, ...] = Field(
        default=(),
        description="Keywords used to fetch candidates for this product",
    )
    exact_count: int = Field(default=0, ge=0)
    high_count: int = Field(default=0, ge=0)
    medium_count: int = Field(default=0, ge=0)

    @classmethod
    def from_matches(
        cls,
        product: str,
        matches: Sequence[MatchCandidate],
        search_keywords: Iterable[str] = (),
    ) -> ProductMatchResult:
        """Build a result and its summary counts from an ordered match list."""
        return cls(
            product=product,
            matches=tuple(matches),
            search_keywords=tuple(sorted(search_keywords)),
            exact_count=sum(1 for m in matches if m.match_type is MatchType.EXACT),
            high_count=sum(1 for m in matches if m.confidence is Confidence.HIGH),
            medium_count=sum(1 for m in matches if m.confidence is Confidence.MEDIUM),
        )

    @property
    def best_match(self) -> MatchCandidate | None:
        """First match in the list, if any."""
        return self.matches[0] if self.matches else None

    def best_for_store(self, store: StoreName) -> MatchCandidate | None:
        """First match offered by ``store``, if any."""
        return next((m for m in self.matches if m.store == store), None)
