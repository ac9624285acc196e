"""Promotions repository.

Read-only access to the ``promotions`` table filled by the flyer import job.
Column mapping to :class:`PromotionRecord`:

- ``old_price`` -> ``regular_price``
- ``new_price`` -> ``sale_price``
- ``start_date``/``end_date`` -> ``valid_from``/``valid_to``
- ``flyer_id`` -> ``source_id``
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import TYPE_CHECKING

from pydantic import ValidationError

from promo_compare.database.connection import get_database_pool
from promo_compare.observability.logging import get_logger
from promo_compare.schemas.enums import StoreName
from promo_compare.schemas.promotion import (
    PromotionDiagnostics,
    PromotionRecord,
    StoreDiagnostics,
)


if TYPE_CHECKING:
    from asyncpg import Pool, Record

logger = get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 200

_SEARCH_QUERY = """
    SELECT
        product_name,
        store_name,
        old_price,
        new_price,
        COALESCE(start_date, $3::date) AS start_date,
        end_date,
        flyer_id,
        category
    FROM promotions
    WHERE product_name ILIKE ANY($1::text[])
      AND store_name = ANY($2::text[])
      AND end_date >= $3::date
      {promotions_filter}
    ORDER BY new_price ASC
    LIMIT $4
"""

_PROMOTIONS_FILTER = "AND old_price IS NOT NULL AND old_price > 0"

_DIAGNOSTICS_QUERY = """
    SELECT
        store_name,
        COUNT(*) AS total,
        COUNT(*) FILTER (WHERE end_date >= $1::date) AS active,
        COUNT(*) FILTER (
            WHERE end_date >= $1::date AND old_price IS NOT NULL AND old_price > 0
        ) AS discounted
    FROM promotions
    WHERE store_name = ANY($2::text[])
    GROUP BY store_name
"""


def like_pattern(keyword: str) -> str:
    """Wrap ``keyword`` in ``%`` after escaping LIKE wildcards."""
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PromotionRepository:
    """Repository for promotion lookups.

    Uses raw asyncpg queries; the pool defaults to the global one.
    """

    def __init__(self, pool: Pool | None = None) -> None:
        """Initialize repository with optional connection pool.

        Args:
            pool: asyncpg connection pool. If None, uses global pool.
        """
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    async def search(
        self,
        keywords: Iterable[str],
        *,
        stores: Sequence[StoreName] | None = None,
        today: date | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        promotions_only: bool = True,
    ) -> list[PromotionRecord]:
        """Find active promotions whose name contains any keyword.

        Args:
            keywords: Search terms, matched case-insensitively as substrings.
            stores: Store allow-list; defaults to every known store.
            today: Offers ending before this day are excluded.
            limit: Maximum number of rows returned, cheapest first.
            promotions_only: Keep only offers with a regular price.

        Returns:
            Valid promotion records; malformed rows are skipped.
        """
        patterns = [like_pattern(k) for k in dict.fromkeys(keywords) if k]
        if not patterns:
            return []

        store_names = [str(s) for s in (stores if stores is not None else StoreName)]
        query = _SEARCH_QUERY.format(
            promotions_filter=_PROMOTIONS_FILTER if promotions_only else ""
        )

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                query,
                patterns,
                store_names,
                today or date.today(),
                limit,
            )

        records: list[PromotionRecord] = []
        for row in rows:
            record = self._row_to_record(row)
            if record is not None:
                records.append(record)

        logger.debug(
            "Promotion search complete",
            keyword_count=len(patterns),
            rows=len(rows),
            records=len(records),
        )
        return records

    async def get_diagnostics(
        self,
        *,
        today: date | None = None,
        stores: Sequence[StoreName] | None = None,
    ) -> PromotionDiagnostics:
        """Count total, active and discounted offers per store."""
        as_of = today or date.today()
        store_names = [str(s) for s in (stores if stores is not None else StoreName)]

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(_DIAGNOSTICS_QUERY, as_of, store_names)

        per_store = {
            StoreName(row["store_name"]): StoreDiagnostics(
                total=row["total"],
                active=row["active"],
                discounted=row["discounted"],
            )
            for row in rows
        }
        return PromotionDiagnostics(
            as_of=as_of,
            total=sum(s.total for s in per_store.values()),
            active=sum(s.active for s in per_store.values()),
            discounted=sum(s.discounted for s in per_store.values()),
            stores=per_store,
        )

    def _row_to_record(self, row: Record) -> PromotionRecord | None:
        """Convert a database row to a PromotionRecord, or None if invalid."""
        try:
            return PromotionRecord(
                product_name=row["product_name"],
                store_name=row["store_name"],
                regular_price=row["old_price"] or None,
                sale_price=row["new_price"],
                valid_from=row["start_date"],
                valid_to=row["end_date"],
                source_id=(
                    str(row["flyer_id"]) if row["flyer_id"] is not None else None
                ),
                category=row["category"],
            )
        except ValidationError:
            logger.debug(
                "Skipping malformed promotion row",
                product_name=row["product_name"],
                store=row["store_name"],
            )
            return None
