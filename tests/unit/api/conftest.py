"""API unit test fixtures.

Apps are created without running the lifespan; tests place the services
they need on ``app.state`` directly.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from promo_compare.cache.result_cache import ResultCache
from promo_compare.core.config import Settings
from promo_compare.factory import create_app
from promo_compare.services.comparison.service import ComparisonService


if TYPE_CHECKING:
    from fastapi import FastAPI

    from promo_compare.schemas.matching import ProductMatchResult


@pytest.fixture
def settings() -> Settings:
    """Settings loaded from the test configuration."""
    return Settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Application without services attached."""
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client that does not run startup or shutdown."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def mock_repository() -> MagicMock:
    """Repository whose search returns nothing by default."""
    repository = MagicMock()
    repository.search = AsyncMock(return_value=[])
    repository.get_diagnostics = AsyncMock()
    return repository


@pytest.fixture
def result_cache(app: FastAPI) -> ResultCache[ProductMatchResult]:
    """Result cache attached to the app."""
    cache: ResultCache[ProductMatchResult] = ResultCache(max_entries=10)
    app.state.result_cache = cache
    return cache


@pytest.fixture
def comparison_service(
    app: FastAPI,
    settings: Settings,
    mock_repository: MagicMock,
    result_cache: ResultCache[ProductMatchResult],
) -> ComparisonService:
    """Initialized comparison service attached to the app."""
    service = ComparisonService(
        cache=result_cache,
        repository=mock_repository,
        settings=settings,
    )
    asyncio.run(service.initialize())
    app.state.comparison_service = service
    return service
