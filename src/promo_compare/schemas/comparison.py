"""Basket comparison schemas.

Contains the per-product and per-store breakdowns produced by the price
aggregator, plus the request/response bodies of the compare endpoint.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from promo_compare.schemas.base import APIRequest, APIResponse, DomainModel
from promo_compare.schemas.enums import (
    Confidence,
    MatchingMode,
    MatchQuality,
    MatchType,
    StoreName,
)
from promo_compare.schemas.matching import ProductMatchResult


class StoreMatch(DomainModel):
    """Best qualifying match for one product in one store."""

    store: StoreName
    product_name: str = Field(..., description="Matched promotion name")
    price: Decimal = Field(..., description="Sale price")
    regular_price: Decimal | None = Field(default=None, description="Regular price")
    discount_percentage: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Rounded discount versus the regular price",
    )
    promotional_savings: Decimal = Field(
        default=Decimal("0.00"),
        description="Regular price minus sale price",
    )
    similarity: float = Field(..., ge=0, le=1)
    confidence: Confidence
    match_type: MatchType

    @property
    def has_promotion(self) -> bool:
        """True when the sale price is below a known regular price."""
        return self.promotional_savings > 0


class ProductComparison(DomainModel):
    """Cross-store view of a single shopping list item."""

    product: str = Field(..., description="Original query string")
    stores: dict[StoreName, StoreMatch] = Field(default_factory=dict)
    best_store: StoreName | None = None
    best_price: Decimal | None = None
    savings: Decimal = Field(
        default=Decimal("0.00"),
        description="Spread between the most and least expensive store",
    )
    max_similarity: float = Field(default=0.0, ge=0, le=1)
    match_quality: MatchQuality = MatchQuality.POOR
    has_promotion: bool = False

    @property
    def found(self) -> bool:
        """True when at least one store has a qualifying match."""
        return bool(self.stores)


class StoreTotal(DomainModel):
    """Basket totals for one store."""

    store: StoreName
    total: Decimal = Field(default=Decimal("0.00"), description="Sum of sale prices")
    regular_total: Decimal = Field(
        default=Decimal("0.00"),
        description="Sum of regular prices (sale price when no regular price)",
    )
    promotional_savings: Decimal = Field(default=Decimal("0.00"))
    products_found: int = Field(default=0, ge=0)
    promotions_found: int = Field(default=0, ge=0)


class ComparisonSummary(DomainModel):
    """Basket-level recommendation over all requested products."""

    store_totals: dict[StoreName, StoreTotal] = Field(default_factory=dict)
    best_store: StoreName | None = Field(
        default=None,
        description="Cheapest store among those that found at least one product",
    )
    total_savings: Decimal = Field(default=Decimal("0.00"), ge=0)
    savings_percentage: Decimal = Field(default=Decimal("0.00"), ge=0)
    total_promotional_savings: Decimal = Field(default=Decimal("0.00"))
    products_found: int = Field(default=0, ge=0)
    total_products: int = Field(default=0, ge=0)
    average_confidence: float = Field(default=0.0, ge=0, le=1)
    quality_histogram: dict[MatchQuality, int] = Field(default_factory=dict)
    missing_products: tuple[str, ...] = ()
    comparisons: tuple[ProductComparison, ...] = ()

    @property
    def totals(self) -> dict[StoreName, Decimal]:
        """Per-store sale-price totals."""
        return {store: entry.total for store, entry in self.store_totals.items()}


class CompareRequest(APIRequest):
    """Body of ``POST /compare``."""

    items: list[str] = Field(
        ...,
        min_length=1,
        description="Shopping list entries, free text",
        examples=[["lait", "oeufs", "riz basmati"]],
    )
    mode: MatchingMode | None = Field(
        default=None,
        description="Matching strictness; defaults to the configured mode",
    )
    include_analysis: bool = Field(
        default=True,
        description="Include a plain-text recommendation",
    )


class ComparisonMetadata(APIResponse):
    """Timing and cache information for a comparison."""

    total_products: int = Field(..., ge=0)
    cache_hits: int = Field(default=0, ge=0)
    products_searched: int = Field(default=0, ge=0)
    candidates_considered: int = Field(default=0, ge=0)
    processing_time_ms: float = Field(default=0.0, ge=0)
    mode: MatchingMode


class CompareResponse(APIResponse):
    """Body returned by ``POST /compare``."""

    success: bool = True
    summary: ComparisonSummary
    matches: dict[str, ProductMatchResult] = Field(
        default_factory=dict,
        description="Ranked matches per requested product",
    )
    analysis: str | None = None
    metadata: ComparisonMetadata




