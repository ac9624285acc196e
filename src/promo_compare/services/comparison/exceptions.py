"""Exceptions for the comparison service."""

from __future__ import annotations


class ComparisonServiceError(Exception):
    """Base exception for comparison service errors."""


class NoValidItemsError(ComparisonServiceError):
    """Raised when no shopping list entry survives input cleaning."""

    def __init__(self, received: int) -> None:
        """Initialize the exception.

        Args:
            received: Number of entries in the original request.
        """
        self.received = received
        super().__init__(
            f"None of the {received} submitted items is a valid product name"
        )
