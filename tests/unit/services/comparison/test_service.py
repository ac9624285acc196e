"""Unit tests for ComparisonService.

Tests cover:
- Shopping list cleaning
- Lifecycle and initialization guards
- Cache hits and misses
- Bounded keyword searches for uncached products
- Degraded results on search failure
- Diagnostics passthrough
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest

from promo_compare.cache.result_cache import ResultCache
from promo_compare.core.config import Settings
from promo_compare.schemas.enums import (
    Confidence,
    MatchingMode,
    MatchType,
    StoreName,
)
from promo_compare.schemas.promotion import PromotionDiagnostics
from promo_compare.services.comparison.exceptions import NoValidItemsError
from promo_compare.services.comparison.service import (
    ComparisonService,
    clean_items,
)


if TYPE_CHECKING:
    from promo_compare.schemas.matching import ProductMatchResult

pytestmark = pytest.mark.unit


@pytest.fixture
def settings() -> Settings:
    """Settings loaded from the test configuration."""
    return Settings()


@pytest.fixture
def mock_repository() -> MagicMock:
    """Repository whose search returns nothing by default."""
    repository = MagicMock()
    repository.search = AsyncMock(return_value=[])
    repository.get_diagnostics = AsyncMock()
    return repository


@pytest.fixture
def result_cache() -> ResultCache[ProductMatchResult]:
    """Fresh result cache."""
    return ResultCache(max_entries=100, default_ttl=60)


@pytest.fixture
async def service(
    settings: Settings,
    mock_repository: MagicMock,
    result_cache: ResultCache[ProductMatchResult],
) -> ComparisonService:
    """Initialized service with a mocked repository."""
    service = ComparisonService(
        cache=result_cache,
        repository=mock_repository,
        settings=settings,
    )
    await service.initialize()
    return service


# =============================================================================
# Input Cleaning
# =============================================================================


class TestCleanItems:
    """Tests for clean_items."""

    def test_strips_and_dedupes_case_insensitively(self) -> None:
        """Should keep the first spelling of each item."""
        assert clean_items(["  Lait ", "lait", "LAIT", "Oeufs"]) == ["Lait", "Oeufs"]

    def test_drops_out_of_bounds_lengths(self) -> None:
        """Should drop too short and too long entries."""
        items = ["a", "", "riz", "x" * 101]

        assert clean_items(items) == ["riz"]

    def test_caps_item_count(self) -> None:
        """Should keep at most max_items entries."""
        items = [f"produit {i}" for i in range(10)]

        assert len(clean_items(items, max_items=3)) == 3


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    """Tests for initialize and shutdown."""

    async def test_compare_requires_initialize(self, settings: Settings) -> None:
        """Should raise RuntimeError before initialize."""
        service = ComparisonService(settings=settings)

        with pytest.raises(RuntimeError, match="not initialized"):
            await service.compare(["lait"])

    async def test_shutdown_blocks_further_calls(
        self, service: ComparisonService
    ) -> None:
        """Should refuse work after shutdown."""
        await service.shutdown()

        with pytest.raises(RuntimeError, match="not initialized"):
            await service.compare(["lait"])

    async def test_disabled_cache_is_dropped(
        self, mock_repository: MagicMock
    ) -> None:
        """Should not cache when caching is disabled in settings."""
        settings = Settings(cache={"enabled": False})
        cache: ResultCache[ProductMatchResult] = ResultCache()
        service = ComparisonService(
            cache=cache, repository=mock_repository, settings=settings
        )
        await service.initialize()

        await service.compare(["lait"])

        assert len(cache) == 0

    def test_cache_key_format(self, settings: Settings) -> None:
        """Should namespace keys by prefix and mode."""
        service = ComparisonService(settings=settings)

        key = service.cache_key("Lait 2%", MatchingMode.STRICT)

        assert key == "promo:v1:strict:lait 2%"

    async def test_thresholds_come_from_settings(
        self, mock_repository: MagicMock
    ) -> None:
        """Should build the aggregator from the matching thresholds."""
        settings = Settings(
            matching={
                "high_confidence_similarity": 0.9,
                "good_similarity": 0.6,
                "fuzzy_floors": {"flexible": 0.25},
            }
        )
        service = ComparisonService(repository=mock_repository, settings=settings)
        await service.initialize()

        assert service._aggregator.quality_thresholds == {
            "excellent": 0.9,
            "good": 0.6,
            "fair": 0.25,
        }
        assert service._engine.confidence_for(0.8) is Confidence.MEDIUM


# =============================================================================
# Compare
# =============================================================================


class TestCompare:
    """Tests for compare."""

    async def test_no_valid_items(self, service: ComparisonService) -> None:
        """Should raise NoValidItemsError when cleaning leaves nothing."""
        with pytest.raises(NoValidItemsError) as exc_info:
            await service.compare(["", " ", "a"])

        assert exc_info.value.received == 3

    async def test_single_search_for_all_products(
        self,
        service: ComparisonService,
        mock_repository: MagicMock,
        make_promotion,
    ) -> None:
        """Should search once when the keyword union fits the cap."""
        mock_repository.search.return_value = [
            make_promotion("Lait 2% 2L", StoreName.IGA, "4.50"),
            make_promotion("Lait 2% 2L", StoreName.METRO, "4.75"),
            make_promotion("Oeufs gros x12", StoreName.METRO, "3.99"),
        ]

        response = await service.compare(["lait", "oeufs", "riz basmati"])

        mock_repository.search.assert_awaited_once()
        keywords = mock_repository.search.await_args.args[0]
        assert {"lait", "oeufs", "riz basmati"} <= set(keywords)
        assert len(keywords) <= service.settings.comparison.max_search_keywords

        summary = response.summary
        assert summary.best_store is StoreName.IGA
        assert summary.products_found == 2
        assert summary.missing_products == ("riz basmati",)
        assert list(response.matches) == ["lait", "oeufs", "riz basmati"]
        assert response.matches["lait"].matches[0].match_type is MatchType.EXACT
        assert response.metadata.products_searched == 3
        assert response.metadata.candidates_considered == 3
        assert response.metadata.mode is MatchingMode.FLEXIBLE
        assert response.analysis is not None

    async def test_cache_hits_skip_search(
        self,
        service: ComparisonService,
        mock_repository: MagicMock,
        result_cache: ResultCache[ProductMatchResult],
        make_promotion,
    ) -> None:
        """Should serve repeated products from the cache."""
        mock_repository.search.return_value = [make_promotion("Lait", StoreName.IGA)]

        await service.compare(["lait"])
        response = await service.compare(["Lait"])

        assert mock_repository.search.await_count == 1
        assert response.metadata.cache_hits == 1
        assert response.metadata.products_searched == 0
        assert response.summary.products_found == 1
        assert "promo:v1:flexible:lait" in result_cache

    async def test_only_misses_are_searched(
        self,
        service: ComparisonService,
        mock_repository: MagicMock,
        make_promotion,
    ) -> None:
        """Should search only for products absent from the cache."""
        mock_repository.search.return_value = [make_promotion("Lait", StoreName.IGA)]
        await service.compare(["lait"])

        response = await service.compare(["lait", "pain"])

        keywords = mock_repository.search.await_args.args[0]
        assert "pain" in keywords
        assert "lait" not in keywords
        assert response.metadata.cache_hits == 1
        assert response.metadata.products_searched == 1

    async def test_mode_is_part_of_cache_key(
        self, service: ComparisonService, mock_repository: MagicMock
    ) -> None:
        """Should not reuse results across matching modes."""
        await service.compare(["lait"], MatchingMode.FLEXIBLE)
        await service.compare(["lait"], MatchingMode.STRICT)

        assert mock_repository.search.await_count == 2

    async def test_search_failure_degrades_to_empty(
        self,
        service: ComparisonService,
        mock_repository: MagicMock,
        result_cache: ResultCache[ProductMatchResult],
    ) -> None:
        """Should return not-found results and leave the cache empty."""
        mock_repository.search.side_effect = OSError("connection refused")

        response = await service.compare(["lait"])

        assert response.summary.products_found == 0
        assert response.matches["lait"].matches == ()
        assert "lait" in response.matches["lait"].search_keywords
        assert len(result_cache) == 0

    async def test_analysis_optional(self, service: ComparisonService) -> None:
        """Should omit the analysis on request."""
        response = await service.compare(["lait"], include_analysis=False)

        assert response.analysis is None

    async def test_search_uses_comparison_limits(
        self, service: ComparisonService, mock_repository: MagicMock
    ) -> None:
        """Should pass the store list and limits to the repository."""
        await service.compare(["lait"])

        kwargs = mock_repository.search.await_args.kwargs
        assert kwargs["stores"] == list(StoreName)
        assert kwargs["limit"] == 200
        assert kwargs["promotions_only"] is True


class TestSearchGroups:
    """Tests for splitting large baskets into bounded keyword searches."""

    BASKET = ["lait", "pain", "oeufs", "poulet", "riz basmati", "fromage"]

    @pytest.fixture
    def substring_repository(self, make_promotion) -> MagicMock:
        """Repository matching keywords as substrings of product names."""
        promotions = [
            make_promotion("Lait 2% 2L", StoreName.IGA, "4.50"),
            make_promotion("Fromage cheddar 400g", StoreName.METRO, "5.99"),
        ]

        async def search(keywords, **kwargs):
            terms = [k.lower() for k in keywords]
            return [
                p for p in promotions if any(t in p.product_name.lower() for t in terms)
            ]

        repository = MagicMock()
        repository.search = AsyncMock(side_effect=search)
        return repository

    async def _service(
        self,
        repository: MagicMock,
        cache: ResultCache[ProductMatchResult],
        settings: Settings,
    ) -> ComparisonService:
        service = ComparisonService(
            cache=cache, repository=repository, settings=settings
        )
        await service.initialize()
        return service

    async def test_every_product_keyword_is_searched(
        self,
        settings: Settings,
        substring_repository: MagicMock,
        result_cache: ResultCache[ProductMatchResult],
    ) -> None:
        """Should split the keyword union without dropping any product's terms."""
        service = await self._service(substring_repository, result_cache, settings)
        cap = settings.comparison.max_search_keywords

        await service.compare(self.BASKET)

        calls = substring_repository.search.await_args_list
        assert len(calls) > 1
        searched: set[str] = set()
        for call in calls:
            assert len(call.args[0]) <= cap
            searched.update(call.args[0])
        for product in self.BASKET:
            own = service._expander.expand_ordered(product)[:cap]
            assert set(own) <= searched

    async def test_large_basket_caches_what_a_fresh_search_finds(
        self,
        settings: Settings,
        substring_repository: MagicMock,
        result_cache: ResultCache[ProductMatchResult],
    ) -> None:
        """Should cache the same result a single-product request computes."""
        service = await self._service(substring_repository, result_cache, settings)

        basket = await service.compare(self.BASKET)
        cached = await service.compare(["fromage"])
        fresh_service = await self._service(
            substring_repository, ResultCache(), settings
        )
        fresh = await fresh_service.compare(["fromage"])

        assert "fromage" not in basket.summary.missing_products
        assert cached.metadata.cache_hits == 1
        assert cached.summary.missing_products == fresh.summary.missing_products == ()
        assert cached.matches["fromage"].matches == fresh.matches["fromage"].matches

    async def test_truncated_pool_is_not_cached(
        self,
        mock_repository: MagicMock,
        result_cache: ResultCache[ProductMatchResult],
        make_promotion,
    ) -> None:
        """Should not cache results from a search that reached its row limit."""
        settings = Settings(comparison={"search_limit": 2})
        mock_repository.search.return_value = [
            make_promotion("Lait 2% 2L", StoreName.IGA, "4.50"),
            make_promotion("Lait entier 4L", StoreName.METRO, "6.49"),
        ]
        service = await self._service(mock_repository, result_cache, settings)

        response = await service.compare(["lait", "pain"])

        assert response.summary.products_found == 1
        assert len(result_cache) == 0


class TestDiagnostics:
    """Tests for get_diagnostics."""

    async def test_passes_configured_stores(
        self, service: ComparisonService, mock_repository: MagicMock
    ) -> None:
        """Should return repository diagnostics for the configured stores."""
        diagnostics = PromotionDiagnostics(as_of=date(2026, 10, 19), total=3)
        mock_repository.get_diagnostics.return_value = diagnostics

        result = await service.get_diagnostics()

        assert result is diagnostics
        mock_repository.get_diagnostics.assert_awaited_once_with(
            stores=list(StoreName)
        )
