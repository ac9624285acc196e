"""Basket comparison endpoints."""

from __future__ import annotations

from typing import Annotated

import asyncpg
from fastapi import APIRouter, Depends

from promo_compare.api.dependencies import get_comparison_service
from promo_compare.core.exceptions import ErrorResponse, ServiceUnavailableException
from promo_compare.observability.logging import get_logger
from promo_compare.schemas.comparison import CompareRequest, CompareResponse
from promo_compare.schemas.promotion import PromotionDiagnostics
from promo_compare.services.comparison.service import ComparisonService


logger = get_logger(__name__)

router = APIRouter(tags=["compare"])


@router.post(
    "/compare",
    response_model=CompareResponse,
    summary="Compare a shopping list",
    description=(
        "Match each shopping list entry against current store promotions and "
        "recommend the cheapest store for the whole basket."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "No valid item in the list"},
        503: {"model": ErrorResponse, "description": "Service not initialized"},
    },
)
async def compare_prices(
    body: CompareRequest,
    service: Annotated[ComparisonService, Depends(get_comparison_service)],
) -> CompareResponse:
    """Compare promotional prices for a shopping list."""
    return await service.compare(
        body.items,
        body.mode,
        include_analysis=body.include_analysis,
    )


@router.get(
    "/compare/diagnostic",
    response_model=PromotionDiagnostics,
    summary="Promotion data diagnostics",
    description="Row counts of the promotions table per store.",
    responses={503: {"model": ErrorResponse, "description": "Database unavailable"}},
)
async def get_diagnostic(
    service: Annotated[ComparisonService, Depends(get_comparison_service)],
) -> PromotionDiagnostics:
    """Report how many promotions are stored, active and discounted."""
    try:
        return await service.get_diagnostics()
    except (asyncpg.PostgresError, OSError, RuntimeError) as e:
        logger.warning("Diagnostics unavailable", error=str(e))
        msg = "Promotion database unavailable"
        raise ServiceUnavailableException(msg) from e
