"""Comparison service orchestrating a basket price comparison.

Provides methods for:
- Shopping list cleaning
- Result cache lookups per product and matching mode
- Keyword searches for cache misses, grouped under the keyword cap
- Batch matching, caching of fresh results and basket aggregation
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from promo_compare.core.config import Settings, get_settings
from promo_compare.database.repositories.promotions import PromotionRepository
from promo_compare.observability.logging import get_logger
from promo_compare.schemas.comparison import CompareResponse, ComparisonMetadata
from promo_compare.schemas.enums import MatchingMode
from promo_compare.schemas.matching import ProductMatchResult
from promo_compare.services.comparison.exceptions import NoValidItemsError
from promo_compare.services.keywords.expander import KeywordExpander
from promo_compare.services.matching.engine import MatchEngine
from promo_compare.services.pricing.aggregator import PriceAggregator
from promo_compare.services.pricing.analysis import build_analysis


if TYPE_CHECKING:
    from promo_compare.cache.result_cache import ResultCache
    from promo_compare.schemas.promotion import (
        PromotionDiagnostics,
        PromotionRecord,
    )

logger = get_logger(__name__)


def clean_items(
    items: Iterable[str],
    *,
    min_length: int = 2,
    max_length: int = 100,
    max_items: int = 50,
) -> list[str]:
    """Strip entries, drop those outside the length bounds and duplicates.

    Duplicates are detected case-insensitively; the first spelling wins.
    """
    cleaned: dict[str, str] = {}
    for raw in items:
        item = raw.strip()
        if not min_length <= len(item) <= max_length:
            continue
        cleaned.setdefault(item.lower(), item)
        if len(cleaned) >= max_items:
            break
    return list(cleaned.values())


class ComparisonService:
    """Service comparing a shopping list across store promotions.

    Orchestrates:
    1. Result cache lookups (``{prefix}:{mode}:{item}`` keys)
    2. Keyword expansion for cache misses, unioned into bounded searches
    3. Promotion search via PromotionRepository
    4. Batch matching and caching of each fresh ProductMatchResult
    5. Price aggregation and the plain-text analysis

    A failed promotion search degrades to empty (uncached) results for the
    affected products instead of failing the request.
    """

    def __init__(
        self,
        cache: ResultCache[ProductMatchResult] | None = None,
        repository: PromotionRepository | None = None,
        settings: Settings | None = None,
        expander: KeywordExpander | None = None,
        engine: MatchEngine | None = None,
        aggregator: PriceAggregator | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            cache: Shared result cache; caching is disabled when None.
            repository: Optional PromotionRepository instance.
            settings: Optional settings; defaults to ``get_settings()``.
            expander: Optional keyword expander.
            engine: Optional match engine.
            aggregator: Optional price aggregator.
        """
        self._cache = cache
        self._repository = repository
        self._settings = settings
        self._expander = expander
        self._engine = engine
        self._aggregator = aggregator
        self._initialized = False

    async def initialize(self) -> None:
        """Build any collaborator that was not injected.

        Called during application startup.
        """
        settings = self._settings = self._settings or get_settings()

        if self._repository is None:
            self._repository = PromotionRepository()

        if self._expander is None:
            self._expander = KeywordExpander(
                max_keywords=settings.keywords.max_keywords,
                min_length=settings.keywords.min_length,
                max_length=settings.keywords.max_length,
            )

        if self._engine is None:
            self._engine = MatchEngine(
                fuzzy_floors=settings.matching.fuzzy_floors,
                max_candidates=settings.matching.max_candidates,
                high_confidence=settings.matching.high_confidence_similarity,
                medium_confidence=settings.matching.qualifying_similarity,
            )

        if self._aggregator is None:
            matching = settings.matching
            self._aggregator = PriceAggregator(
                qualifying_similarity=matching.qualifying_similarity,
                stores=settings.comparison.stores,
                excellent_similarity=matching.high_confidence_similarity,
                good_similarity=matching.good_similarity,
                fair_similarity=matching.fuzzy_floors[MatchingMode.FLEXIBLE],
            )

        if not settings.cache.enabled:
            self._cache = None

        self._initialized = True
        logger.info(
            "ComparisonService initialized",
            cache_enabled=self._cache is not None,
            stores=len(settings.comparison.stores),
        )

    async def shutdown(self) -> None:
        """Cleanup service resources.

        Called during application shutdown.
        """
        self._initialized = False
        logger.info("ComparisonService shutdown")

    @property
    def settings(self) -> Settings:
        """Settings in use; only valid after :meth:`initialize`."""
        if self._settings is None:
            msg = "ComparisonService not initialized"
            raise RuntimeError(msg)
        return self._settings

    def cache_key(self, item: str, mode: MatchingMode) -> str:
        """Cache key of one product for one matching mode."""
        return f"{self.settings.cache.key_prefix}:{mode}:{item.lower()}"

    async def compare(
        self,
        items: Sequence[str],
        mode: MatchingMode | None = None,
        *,
        include_analysis: bool = True,
    ) -> CompareResponse:
        """Compare a shopping list across stores.

        Args:
            items: Shopping list entries, free text.
            mode: Matching strictness; defaults to the configured mode.
            include_analysis: Whether to render the text recommendation.

        Returns:
            Summary, per-product matches, optional analysis and metadata.

        Raises:
            NoValidItemsError: If no entry survives cleaning.
            RuntimeError: If the service is not initialized.
        """
        if not self._initialized:
            msg = "ComparisonService not initialized"
            logger.error(msg)
            raise RuntimeError(msg)

        started = time.perf_counter()
        settings = self.settings
        limits = settings.comparison
        mode = mode or settings.matching.default_mode

        products = clean_items(
            items,
            min_length=limits.min_item_length,
            max_length=limits.max_item_length,
            max_items=limits.max_items,
        )
        if not products:
            raise NoValidItemsError(len(items))

        keys = {product: self.cache_key(product, mode) for product in products}
        cached = self._cache.batch_get(keys.values()) if self._cache else {}
        results = {p: cached[k] for p, k in keys.items() if k in cached}
        misses = [p for p in products if p not in results]

        candidates_considered = 0
        if misses:
            fresh, candidates_considered = await self._match_products(misses, mode)
            results.update(fresh)

        ordered = {product: results[product] for product in products}
        assert self._aggregator is not None
        summary = self._aggregator.aggregate(ordered)

        metadata = ComparisonMetadata(
            total_products=len(products),
            cache_hits=len(products) - len(misses),
            products_searched=len(misses),
            candidates_considered=candidates_considered,
            processing_time_ms=round((time.perf_counter() - started) * 1000, 2),
            mode=mode,
        )
        logger.info(
            "Comparison complete",
            total_products=metadata.total_products,
            cache_hits=metadata.cache_hits,
            products_found=summary.products_found,
            processing_time_ms=metadata.processing_time_ms,
        )

        return CompareResponse(
            success=True,
            summary=summary,
            matches=ordered,
            analysis=build_analysis(summary) if include_analysis else None,
            metadata=metadata,
        )

    async def get_diagnostics(self) -> PromotionDiagnostics:
        """Promotion table counts for the configured stores."""
        if not self._initialized or self._repository is None:
            msg = "ComparisonService not initialized"
            raise RuntimeError(msg)
        return await self._repository.get_diagnostics(
            stores=self.settings.comparison.stores
        )

    def _search_groups(
        self,
        keywords_by_product: dict[str, list[str]],
    ) -> list[tuple[list[str], list[str]]]:
        """Split products into groups whose keyword union fits one search.

        Each product keeps every one of its own keywords (up to the search
        cap); a group closes when the next product would overflow it.
        """
        cap = self.settings.comparison.max_search_keywords
        groups: list[tuple[list[str], list[str]]] = []
        products: list[str] = []
        keywords: dict[str, None] = {}

        for product, expanded in keywords_by_product.items():
            own = expanded[:cap]
            merged = keywords | dict.fromkeys(own)
            if products and len(merged) > cap:
                groups.append((products, list(keywords)))
                products, merged = [], dict.fromkeys(own)
            products.append(product)
            keywords = merged

        if products:
            groups.append((products, list(keywords)))
        return groups

    async def _match_products(
        self,
        products: Sequence[str],
        mode: MatchingMode,
    ) -> tuple[dict[str, ProductMatchResult], int]:
        """Search for all ``products`` in keyword groups and match each pool."""
        assert self._expander is not None

        keywords_by_product = {
            product: self._expander.expand_ordered(product) for product in products
        }
        groups = self._search_groups(keywords_by_product)

        outcomes = await asyncio.gather(
            *[
                self._match_group(group, keywords, keywords_by_product, mode)
                for group, keywords in groups
            ]
        )

        fresh: dict[str, ProductMatchResult] = {}
        candidates = 0
        for results, pool_size in outcomes:
            fresh.update(results)
            candidates += pool_size

        logger.debug(
            "Matched uncached products",
            products=len(products),
            searches=len(groups),
            candidates=candidates,
        )
        return fresh, candidates

    async def _match_group(
        self,
        products: list[str],
        keywords: list[str],
        keywords_by_product: dict[str, list[str]],
        mode: MatchingMode,
    ) -> tuple[dict[str, ProductMatchResult], int]:
        """Run one search for a product group and match its shared pool.

        Results are cached only when the search succeeded and its row limit
        was not reached, so a truncated pool never persists as "not found".
        """
        assert self._engine is not None
        assert self._repository is not None
        limits = self.settings.comparison

        try:
            pool: list[PromotionRecord] = await self._repository.search(
                keywords,
                stores=limits.stores,
                limit=limits.search_limit,
                promotions_only=limits.promotions_only,
            )
        except Exception:
            logger.exception(
                "Promotion search failed - returning empty results",
                products=len(products),
                keywords=len(keywords),
            )
            return {
                product: ProductMatchResult.from_matches(
                    product, [], keywords_by_product[product]
                )
                for product in products
            }, 0

        matches = self._engine.batch_match(products, pool, mode)
        cacheable = self._cache is not None and len(pool) < limits.search_limit
        if len(pool) >= limits.search_limit:
            logger.warning(
                "Promotion search hit its row limit - results not cached",
                products=len(products),
                limit=limits.search_limit,
            )

        fresh: dict[str, ProductMatchResult] = {}
        for product in products:
            result = ProductMatchResult.from_matches(
                product, matches[product], keywords_by_product[product]
            )
            fresh[product] = result
            if cacheable:
                assert self._cache is not None
                self._cache.set(
                    self.cache_key(product, mode),
                    result,
                    ttl=self.settings.cache.default_ttl_seconds,
                )
        return fresh, len(pool)
