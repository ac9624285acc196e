"""Keyword expansion for product queries.

Turns a free-text shopping list entry into the bounded set of search terms
sent to the promotion search. Expansion order:

1. raw lower-cased input and its normalised form
2. significant tokens
3. adjacent-token bigrams
4. synonyms, translations and brands of each token
5. brand names found in the query
6. quantity/format strings ("2%", "500 ml")
7. orthographic variants of each token

Terms outside the configured length bounds are dropped and the result is
truncated to the first ``max_keywords`` terms in that order.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from promo_compare.observability.logging import get_logger
from promo_compare.services.keywords.constants import (
    BRANDS,
    FORMAT_PATTERN,
    MAX_KEYWORD_LENGTH,
    MAX_KEYWORDS,
    MIN_KEYWORD_LENGTH,
    ORTHOGRAPHIC_VARIANTS,
    SYNONYMS,
)
from promo_compare.services.keywords.normalization import (
    normalize_text,
    significant_tokens,
    singular,
    strip_accents,
)


logger = get_logger(__name__)

_BRAND_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (brand, re.compile(rf"\b{re.escape(brand)}\b")) for brand in BRANDS
)


class KeywordExpander:
    """Expands a product name into a bounded, deterministic keyword set.

    Instances hold only their bounds and are safe to share between requests.
    """

    def __init__(
        self,
        max_keywords: int = MAX_KEYWORDS,
        min_length: int = MIN_KEYWORD_LENGTH,
        max_length: int = MAX_KEYWORD_LENGTH,
    ) -> None:
        """Initialize the expander.

        Args:
            max_keywords: Maximum number of keywords returned per query.
            min_length: Shortest keyword kept.
            max_length: Longest keyword kept.
        """
        if max_keywords < 1:
            msg = "max_keywords must be at least 1"
            raise ValueError(msg)
        if min_length > max_length:
            msg = "min_length must not exceed max_length"
            raise ValueError(msg)
        self.max_keywords = max_keywords
        self.min_length = min_length
        self.max_length = max_length

    def expand(self, product_name: str) -> frozenset[str]:
        """Expand ``product_name`` into its keyword set.

        Args:
            product_name: Free-text shopping list entry.

        Returns:
            Keywords of ``min_length``..``max_length`` characters, at most
            ``max_keywords`` of them. Empty when the normalised input has
            fewer than ``min_length`` characters.
        """
        return frozenset(self.expand_ordered(product_name))

    def expand_ordered(self, product_name: str) -> list[str]:
        """Same as :meth:`expand` but keeps insertion order."""
        normalized = normalize_text(product_name)
        if len(normalized) < self.min_length:
            return []

        ordered: dict[str, None] = {}

        def add(terms: Iterable[str]) -> None:
            for term in terms:
                ordered.setdefault(term.strip(), None)

        add((product_name.strip().lower(), normalized))

        tokens = significant_tokens(normalized)
        add(tokens)
        add(f"{first} {second}" for first, second in zip(tokens, tokens[1:]))

        for token in tokens:
            synonyms = SYNONYMS.get(token) or SYNONYMS.get(singular(token), ())
            add(s for s in synonyms if len(s) >= self.min_length)

        add(brand for brand, pattern in _BRAND_PATTERNS if pattern.search(normalized))
        formats = FORMAT_PATTERN.finditer(strip_accents(product_name))
        add(match.group(0) for match in formats)

        for token in tokens:
            add(ORTHOGRAPHIC_VARIANTS.get(token, ()))

        keywords = [
            term
            for term in ordered
            if self.min_length <= len(term) <= self.max_length
        ][: self.max_keywords]

        logger.debug(
            "Expanded product keywords",
            product=product_name,
            keyword_count=len(keywords),
        )
        return keywords
