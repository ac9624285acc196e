"""API v1 router aggregating all endpoint routers.

All endpoints are mounted under the configured ``api.v1_prefix``
(``/api/v1/promo-compare`` by default).
"""

from __future__ import annotations

from fastapi import APIRouter

from promo_compare.api.v1.endpoints import cache, compare, health


router = APIRouter()

router.include_router(health.router)
router.include_router(compare.router)
router.include_router(cache.router)
