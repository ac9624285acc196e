"""Database access layer.

Provides the asyncpg connection pool and the read-only promotions repository.
"""

from promo_compare.database.connection import (
    check_database_health,
    close_database_pool,
    get_database_pool,
    init_database_pool,
)


__all__ = [
    "check_database_health",
    "close_database_pool",
    "get_database_pool",
    "init_database_pool",
]
