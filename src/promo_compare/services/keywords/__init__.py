"""Keyword expansion module.

Normalises product names and expands them into bounded search keyword sets.
"""

from promo_compare.services.keywords.expander import KeywordExpander
from promo_compare.services.keywords.normalization import (
    matching_form,
    matching_tokens,
    normalize_text,
)


__all__ = [
    "KeywordExpander",
    "matching_form",
    "matching_tokens",
    "normalize_text",
]
