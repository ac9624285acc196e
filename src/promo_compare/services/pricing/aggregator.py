"""Basket price aggregation.

Reduces per-product match results into per-product comparisons, per-store
totals and a basket-level recommendation. Only qualifying matches (at or
above the qualifying similarity) with a price in the valid range count
towards totals; everything else is absorbed as "not found".
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal

from promo_compare.observability.logging import get_logger
from promo_compare.schemas.comparison import (
    ComparisonSummary,
    ProductComparison,
    StoreMatch,
    StoreTotal,
)
from promo_compare.schemas.enums import MatchQuality, StoreName
from promo_compare.schemas.matching import MatchCandidate, ProductMatchResult
from promo_compare.services.matching.constants import (
    GOOD_SIMILARITY,
    QUALIFYING_SIMILARITY,
    SIMILARITY_PRECISION,
)
from promo_compare.services.pricing.constants import (
    CENT,
    EXCELLENT_SIMILARITY,
    FAIR_QUALITY_SIMILARITY,
    HUNDRED,
    MAX_VALID_PRICE,
    MIN_VALID_PRICE,
    ZERO,
)


logger = get_logger(__name__)


def round_cents(value: Decimal) -> Decimal:
    """Round to the cent, halves away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def is_valid_price(price: Decimal | None) -> bool:
    """Whether ``price`` is usable for totals."""
    return price is not None and MIN_VALID_PRICE <= price <= MAX_VALID_PRICE


def match_quality(
    similarity: float,
    *,
    excellent: float = EXCELLENT_SIMILARITY,
    good: float = GOOD_SIMILARITY,
    fair: float = FAIR_QUALITY_SIMILARITY,
) -> MatchQuality:
    """Classify the best similarity found for a product."""
    if similarity >= excellent:
        return MatchQuality.EXCELLENT
    if similarity >= good:
        return MatchQuality.GOOD
    if similarity >= fair:
        return MatchQuality.FAIR
    return MatchQuality.POOR


def _cheapest(prices: Mapping[StoreName, Decimal]) -> StoreName | None:
    """Lowest-priced store; ties go to the store with the higher priority."""
    best: StoreName | None = None
    for store in sorted(prices, key=lambda s: s.priority):
        if best is None or prices[store] < prices[best]:
            best = store
    return best


class PriceAggregator:
    """Turns per-product matches into a basket comparison."""

    def __init__(
        self,
        qualifying_similarity: float = QUALIFYING_SIMILARITY,
        stores: Sequence[StoreName] | None = None,
        *,
        excellent_similarity: float = EXCELLENT_SIMILARITY,
        good_similarity: float = GOOD_SIMILARITY,
        fair_similarity: float = FAIR_QUALITY_SIMILARITY,
    ) -> None:
        """Initialize the aggregator.

        Args:
            qualifying_similarity: Minimum similarity for a match to count.
            stores: Stores reported in totals; defaults to every store.
            excellent_similarity: Lower bound of the excellent quality bucket.
            good_similarity: Lower bound of the good quality bucket.
            fair_similarity: Lower bound of the fair quality bucket.
        """
        self.qualifying_similarity = qualifying_similarity
        self.quality_thresholds = {
            "excellent": excellent_similarity,
            "good": good_similarity,
            "fair": fair_similarity,
        }
        selected = stores if stores is not None else tuple(StoreName)
        self.stores: tuple[StoreName, ...] = tuple(
            sorted(selected, key=lambda s: s.priority)
        )

    def aggregate(
        self,
        per_product: Mapping[str, ProductMatchResult],
    ) -> ComparisonSummary:
        """Aggregate match results, in the mapping's order, into a summary."""
        comparisons = tuple(
            self.compare_product(query, result)
            for query, result in per_product.items()
        )
        store_totals = {
            store: self._store_total(store, comparisons) for store in self.stores
        }

        participating = {
            store: entry.total
            for store, entry in store_totals.items()
            if entry.products_found > 0
        }
        best_store = _cheapest(participating)
        total_savings = ZERO
        savings_percentage = ZERO
        if participating:
            max_total = max(participating.values())
            total_savings = round_cents(max_total - min(participating.values()))
            if max_total > 0:
                savings_percentage = round_cents(total_savings / max_total * HUNDRED)

        found = [c for c in comparisons if c.found]
        histogram = dict.fromkeys(MatchQuality, 0)
        for comparison in comparisons:
            histogram[comparison.match_quality] += 1

        average_confidence = 0.0
        if found:
            mean = sum(c.max_similarity for c in found) / len(found)
            average_confidence = round(mean, SIMILARITY_PRECISION)

        summary = ComparisonSummary(
            store_totals=store_totals,
            best_store=best_store,
            total_savings=total_savings,
            savings_percentage=savings_percentage,
            total_promotional_savings=round_cents(
                sum((t.promotional_savings for t in store_totals.values()), ZERO)
            ),
            products_found=len(found),
            total_products=len(comparisons),
            average_confidence=average_confidence,
            quality_histogram=histogram,
            missing_products=tuple(c.product for c in comparisons if not c.found),
            comparisons=comparisons,
        )

        logger.info(
            "Basket aggregated",
            total_products=summary.total_products,
            products_found=summary.products_found,
            best_store=str(best_store) if best_store else None,
            total_savings=str(total_savings),
        )
        return summary

    def compare_product(
        self,
        query: str,
        result: ProductMatchResult,
    ) -> ProductComparison:
        """Build the cross-store view of one product."""
        stores: dict[StoreName, StoreMatch] = {}
        for store in self.stores:
            candidate = self._best_qualifying(result, store)
            if candidate is not None:
                stores[store] = self._store_match(candidate)

        prices = {store: match.price for store, match in stores.items()}
        best_store = _cheapest(prices)
        spread = max(prices.values()) - min(prices.values()) if prices else ZERO
        max_similarity = max((m.similarity for m in result.matches), default=0.0)

        return ProductComparison(
            product=query,
            stores=stores,
            best_store=best_store,
            best_price=prices[best_store] if best_store else None,
            savings=round_cents(spread),
            max_similarity=max_similarity,
            match_quality=match_quality(max_similarity, **self.quality_thresholds),
            has_promotion=any(m.has_promotion for m in stores.values()),
        )

    def _best_qualifying(
        self,
        result: ProductMatchResult,
        store: StoreName,
    ) -> MatchCandidate | None:
        return next(
            (
                m
                for m in result.matches
                if m.store == store
                and m.similarity >= self.qualifying_similarity
                and is_valid_price(m.price)
            ),
            None,
        )

    @staticmethod
    def _store_match(candidate: MatchCandidate) -> StoreMatch:
        regular = candidate.regular_price
        if not is_valid_price(regular):
            regular = None
        savings = ZERO
        discount = 0
        if regular is not None and regular > candidate.price:
            savings = round_cents(regular - candidate.price)
            ratio = savings / regular * HUNDRED
            discount = int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))

        return StoreMatch(
            store=candidate.store,
            product_name=candidate.matched_name,
            price=candidate.price,
            regular_price=regular,
            discount_percentage=discount,
            promotional_savings=savings,
            similarity=candidate.similarity,
            confidence=candidate.confidence,
            match_type=candidate.match_type,
        )

    @staticmethod
    def _store_total(
        store: StoreName,
        comparisons: Sequence[ProductComparison],
    ) -> StoreTotal:
        matches = [c.stores[store] for c in comparisons if store in c.stores]
        total = sum((m.price for m in matches), ZERO)
        regular_total = sum((m.regular_price or m.price for m in matches), ZERO)
        return StoreTotal(
            store=store,
            total=round_cents(total),
            regular_total=round_cents(regular_total),
            promotional_savings=round_cents(regular_total - total),
            products_found=len(matches),
            promotions_found=sum(1 for m in matches if m.has_promotion),
        )
