"""Application lifespan event handlers.

This module defines the lifespan context manager that handles:
- Startup: logging, the process-wide result cache, the database pool, the
  comparison service and the periodic cache cleanup task
- Shutdown: the reverse, flushing the cache and closing the pool
"""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from promo_compare.cache.result_cache import ResultCache
from promo_compare.core.config import Settings, get_settings
from promo_compare.database.connection import close_database_pool, init_database_pool
from promo_compare.observability.logging import get_logger, setup_logging
from promo_compare.schemas.matching import ProductMatchResult
from promo_compare.services.comparison.service import ComparisonService


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

logger = get_logger(__name__)


async def run_cache_cleanup(
    cache: ResultCache[ProductMatchResult],
    interval_seconds: float,
) -> None:
    """Purge expired cache entries every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = cache.cleanup()
        if removed:
            logger.debug("Expired cache entries purged", removed=removed)


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup."""
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
    )

    cache: ResultCache[ProductMatchResult] = ResultCache(
        max_entries=settings.cache.max_entries,
        default_ttl=settings.cache.default_ttl_seconds,
    )
    app.state.result_cache = cache

    # Database is non-critical: searches degrade to empty results
    try:
        await init_database_pool()
    except Exception:
        logger.exception("Failed to initialize database - searches will return nothing")

    await _init_comparison_service(app, settings, cache)

    app.state.cleanup_task = asyncio.create_task(
        run_cache_cleanup(cache, settings.cache.cleanup_interval_seconds),
        name="result-cache-cleanup",
    )
    logger.info("Application startup complete")


async def _init_comparison_service(
    app: FastAPI,
    settings: Settings,
    cache: ResultCache[ProductMatchResult],
) -> None:
    """Initialize the comparison service."""
    try:
        service = ComparisonService(cache=cache, settings=settings)
        await service.initialize()
        app.state.comparison_service = service
    except Exception:
        logger.exception(
            "Failed to initialize ComparisonService - comparisons unavailable"
        )
        app.state.comparison_service = None


async def _shutdown(app: FastAPI) -> None:
    """Shutdown all application services."""
    logger.info("Shutting down application")

    task: asyncio.Task[None] | None = getattr(app.state, "cleanup_task", None)
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    service: ComparisonService | None = getattr(app.state, "comparison_service", None)
    if service is not None:
        await service.shutdown()

    cache: ResultCache[ProductMatchResult] | None = getattr(
        app.state, "result_cache", None
    )
    if cache is not None:
        cleared = cache.clear()
        logger.debug("Result cache flushed", entries=cleared)

    await close_database_pool()
    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    await _startup(app, settings)
    try:
        yield
    finally:
        await _shutdown(app)
