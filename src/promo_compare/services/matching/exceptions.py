"""Exceptions for the match engine.

Only contract violations are raised; queries without matches simply
produce empty result lists.
"""

from __future__ import annotations


class MatchingError(Exception):
    """Base exception for match engine errors."""


class CandidatePoolTooLargeError(MatchingError):
    """Raised when a candidate pool exceeds the configured bound."""

    def __init__(self, pool_size: int, limit: int) -> None:
        """Initialize the exception.

        Args:
            pool_size: Number of candidates supplied.
            limit: Maximum accepted pool size.
        """
        self.pool_size = pool_size
        self.limit = limit
        super().__init__(
            f"Candidate pool of {pool_size} records exceeds the limit of {limit}"
        )
