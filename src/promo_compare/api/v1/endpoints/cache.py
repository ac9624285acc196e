"""Result cache administration endpoints."""

from __future__ import annotations

import re
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from promo_compare.api.dependencies import get_result_cache
from promo_compare.cache.result_cache import ResultCache
from promo_compare.core.exceptions import BadRequestException
from promo_compare.observability.logging import get_logger
from promo_compare.schemas.base import APIResponse
from promo_compare.schemas.matching import ProductMatchResult


logger = get_logger(__name__)

router = APIRouter(prefix="/cache", tags=["cache"])

ResultCacheDep = Annotated[ResultCache[ProductMatchResult], Depends(get_result_cache)]


class CacheStatsResponse(APIResponse):
    """Result cache statistics."""

    size: int = Field(..., ge=0)
    max_entries: int = Field(..., ge=1)
    default_ttl_seconds: float
    hits: int
    misses: int
    hit_rate: float
    evictions: int
    expirations: int
    stale_entries: int
    entry_hits: int


class CacheClearResponse(APIResponse):
    """Outcome of a cache invalidation."""

    cleared: int = Field(..., ge=0, description="Number of entries removed")
    pattern: str | None = None


@router.get(
    "/stats",
    response_model=CacheStatsResponse,
    summary="Result cache statistics",
)
async def get_cache_stats(cache: ResultCacheDep) -> CacheStatsResponse:
    """Return size, capacity and hit counters of the result cache."""
    return CacheStatsResponse(**cache.get_stats())


@router.delete(
    "",
    response_model=CacheClearResponse,
    summary="Clear the result cache",
    description=(
        "Remove every cached result, or only the keys matching the optional "
        "regular expression."
    ),
)
async def clear_cache(
    cache: ResultCacheDep,
    pattern: Annotated[
        str | None,
        Query(description="Regular expression selecting keys to remove"),
    ] = None,
) -> CacheClearResponse:
    """Invalidate cached match results."""
    if pattern is None:
        cleared = cache.clear()
    else:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            msg = f"Invalid pattern: {e}"
            raise BadRequestException(msg) from e
        cleared = cache.invalidate_pattern(regex)

    logger.info("Result cache cleared", cleared=cleared, pattern=pattern)
    return CacheClearResponse(cleared=cleared, pattern=pattern)
