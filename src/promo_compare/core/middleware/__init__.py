"""Custom middleware components."""

from promo_compare.core.middleware.logging import LoggingMiddleware
from promo_compare.core.middleware.request_id import RequestIDMiddleware


__all__ = [
    "LoggingMiddleware",
    "RequestIDMiddleware",
]
