"""Shared test fixtures for the promo-compare service tests.

Provides promotion and match builders used across test modules. ``APP_ENV``
is forced to ``test`` before any settings are loaded.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import date, timedelta
from decimal import Decimal

import pytest


os.environ["APP_ENV"] = "test"

from promo_compare.core.config import get_settings  # noqa: E402
from promo_compare.schemas.enums import (  # noqa: E402
    Confidence,
    MatchType,
    StoreName,
)
from promo_compare.schemas.matching import (  # noqa: E402
    MatchCandidate,
    ProductMatchResult,
)
from promo_compare.schemas.promotion import PromotionRecord  # noqa: E402


TODAY = date(2026, 10, 19)

PromotionFactory = Callable[..., PromotionRecord]
MatchFactory = Callable[..., MatchCandidate]


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Rebuild settings for every test so environment overrides apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_promotion() -> PromotionFactory:
    """Build PromotionRecord instances with sensible defaults."""

    def _make(
        product_name: str,
        store: StoreName = StoreName.IGA,
        sale_price: str = "4.50",
        regular_price: str | None = None,
        **overrides: object,
    ) -> PromotionRecord:
        values: dict[str, object] = {
            "product_name": product_name,
            "store_name": store,
            "sale_price": Decimal(sale_price),
            "regular_price": Decimal(regular_price) if regular_price else None,
            "valid_from": TODAY - timedelta(days=2),
            "valid_to": TODAY + timedelta(days=5),
        }
        values.update(overrides)
        return PromotionRecord(**values)

    return _make


@pytest.fixture
def make_match() -> MatchFactory:
    """Build MatchCandidate instances with sensible defaults."""

    def _make(
        store: StoreName,
        price: str,
        similarity: float = 1.0,
        *,
        name: str = "Produit",
        regular_price: str | None = None,
        match_type: MatchType = MatchType.EXACT,
        confidence: Confidence | None = None,
    ) -> MatchCandidate:
        if confidence is None:
            confidence = (
                Confidence.HIGH
                if similarity >= 0.7
                else Confidence.MEDIUM
                if similarity >= 0.4
                else Confidence.LOW
            )
        return MatchCandidate(
            matched_name=name,
            store=store,
            price=Decimal(price),
            regular_price=Decimal(regular_price) if regular_price else None,
            similarity=similarity,
            match_type=match_type,
            confidence=confidence,
        )

    return _make


@pytest.fixture
def make_result() -> Callable[..., ProductMatchResult]:
    """Wrap matches into a ProductMatchResult."""

    def _make(product: str, *matches: MatchCandidate) -> ProductMatchResult:
        return ProductMatchResult.from_matches(product, list(matches))

    return _make
