"""FastAPI dependencies for service access.

Services are initialized during application startup and stored in
``app.state``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from promo_compare.core.exceptions import ServiceUnavailableException


if TYPE_CHECKING:
    from promo_compare.cache.result_cache import ResultCache
    from promo_compare.schemas.matching import ProductMatchResult
    from promo_compare.services.comparison.service import ComparisonService


async def get_comparison_service(request: Request) -> ComparisonService:
    """Get the comparison service from app state.

    Raises:
        ServiceUnavailableException: If the service is not initialized.
    """
    service: ComparisonService | None = getattr(
        request.app.state, "comparison_service", None
    )
    if service is None:
        msg = "Comparison service not available"
        raise ServiceUnavailableException(msg)
    return service


async def get_result_cache(request: Request) -> ResultCache[ProductMatchResult]:
    """Get the process-wide result cache from app state.

    Raises:
        ServiceUnavailableException: If the cache is not initialized.
    """
    cache: ResultCache[ProductMatchResult] | None = getattr(
        request.app.state, "result_cache", None
    )
    if cache is None:
        msg = "Result cache not available"
        raise ServiceUnavailableException(msg)
    return cache
