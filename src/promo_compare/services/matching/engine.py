"""Multi-tier match engine.

Scores every promotion in a candidate pool against a query with the first
tier that applies:

- exact: identical matching forms (similarity 1.0)
- contains: one matching form contains the other, scored by length ratio
- semantic: shared product words, synonyms and translations included,
  scored by the fraction of query words found
- fuzzy: normalised Levenshtein similarity at or above the mode floor

Results are grouped by store in store-priority order and sorted within each
store by tier, then descending similarity, then ascending price.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rapidfuzz.distance import Levenshtein

from promo_compare.observability.logging import get_logger
from promo_compare.schemas.enums import Confidence, MatchingMode, MatchType
from promo_compare.schemas.matching import MatchCandidate
from promo_compare.services.keywords.normalization import (
    equivalent_phrases,
    equivalent_tokens,
    matching_tokens,
    normalize_text,
    singular,
)
from promo_compare.services.matching.constants import (
    CONTAINS_BASE_SIMILARITY,
    CONTAINS_RATIO_WEIGHT,
    EXACT_SIMILARITY,
    FUZZY_FLOORS,
    HIGH_CONFIDENCE_SIMILARITY,
    MAX_CANDIDATE_POOL,
    QUALIFYING_SIMILARITY,
    SEMANTIC_MAX_SIMILARITY,
    SIMILARITY_PRECISION,
)
from promo_compare.services.matching.exceptions import CandidatePoolTooLargeError


if TYPE_CHECKING:
    from promo_compare.schemas.promotion import PromotionRecord

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _PreparedName:
    """Normalised views of one product name, computed once per batch."""

    normalized: str
    form: str
    tokens: frozenset[str]
    bases: frozenset[str]

    @classmethod
    def of(cls, name: str) -> _PreparedName:
        tokens = matching_tokens(name)
        return cls(
            normalized=normalize_text(name),
            form=" ".join(tokens),
            tokens=frozenset(tokens),
            bases=frozenset(singular(t) for t in tokens),
        )


@dataclass(frozen=True, slots=True)
class _PreparedQuery:
    """A query with its per-word equivalents resolved."""

    name: _PreparedName
    words: tuple[str, ...]
    equivalents: tuple[frozenset[str], ...]
    phrases: tuple[tuple[tuple[str, ...], ...], ...]

    @classmethod
    def of(cls, query: str) -> _PreparedQuery:
        name = _PreparedName.of(query)
        words = tuple(dict.fromkeys(matching_tokens(query)))
        return cls(
            name=name,
            words=words,
            equivalents=tuple(equivalent_tokens(w) for w in words),
            phrases=tuple(equivalent_phrases(w) for w in words),
        )


class MatchEngine:
    """Scores and ranks promotion records against product queries.

    The engine is stateless apart from its thresholds; one instance can be
    shared by concurrent requests.
    """

    def __init__(
        self,
        *,
        fuzzy_floors: Mapping[MatchingMode, float] | None = None,
        max_candidates: int = MAX_CANDIDATE_POOL,
        high_confidence: float = HIGH_CONFIDENCE_SIMILARITY,
        medium_confidence: float = QUALIFYING_SIMILARITY,
    ) -> None:
        """Initialize the engine.

        Args:
            fuzzy_floors: Minimum fuzzy similarity per mode; missing modes
                fall back to the built-in floors.
            max_candidates: Largest accepted candidate pool.
            high_confidence: Similarity at or above which confidence is high.
            medium_confidence: Similarity at or above which confidence is medium.
        """
        self._fuzzy_floors = {**FUZZY_FLOORS, **(fuzzy_floors or {})}
        self._max_candidates = max_candidates
        self._high_confidence = high_confidence
        self._medium_confidence = medium_confidence

    def fuzzy_floor(self, mode: MatchingMode) -> float:
        """Minimum fuzzy similarity accepted in ``mode``."""
        return self._fuzzy_floors[mode]

    def confidence_for(self, similarity: float) -> Confidence:
        """Bucket a similarity score."""
        if similarity >= self._high_confidence:
            return Confidence.HIGH
        if similarity >= self._medium_confidence:
            return Confidence.MEDIUM
        return Confidence.LOW

    def match(
        self,
        query: str,
        candidates: Sequence[PromotionRecord],
        mode: MatchingMode = MatchingMode.FLEXIBLE,
    ) -> list[MatchCandidate]:
        """Rank ``candidates`` against a single query.

        Raises:
            CandidatePoolTooLargeError: If the pool exceeds ``max_candidates``.
        """
        return self.batch_match([query], candidates, mode)[query]

    def batch_match(
        self,
        queries: Sequence[str],
        candidates: Sequence[PromotionRecord],
        mode: MatchingMode = MatchingMode.FLEXIBLE,
    ) -> dict[str, list[MatchCandidate]]:
        """Rank one shared candidate pool against several queries.

        Each query is scored independently, so a record found through the
        keywords of one query can still match another.

        Args:
            queries: Original query strings; duplicates share one entry.
            candidates: Union of the promotions fetched for all queries.
            mode: Matching strictness, selects the fuzzy floor.

        Returns:
            Mapping of each query to its ordered matches (possibly empty).

        Raises:
            CandidatePoolTooLargeError: If the pool exceeds ``max_candidates``.
        """
        if len(candidates) > self._max_candidates:
            raise CandidatePoolTooLargeError(len(candidates), self._max_candidates)

        prepared = [
            (record, _PreparedName.of(record.product_name)) for record in candidates
        ]
        floor = self.fuzzy_floor(mode)

        results: dict[str, list[MatchCandidate]] = {}
        for query in queries:
            if query in results:
                continue
            results[query] = self._rank(_PreparedQuery.of(query), prepared, floor)

        logger.debug(
            "Batch match complete",
            queries=len(results),
            candidates=len(candidates),
            mode=str(mode),
            matched=sum(1 for matches in results.values() if matches),
        )
        return results

    def _rank(
        self,
        query: _PreparedQuery,
        prepared: Sequence[tuple[PromotionRecord, _PreparedName]],
        floor: float,
    ) -> list[MatchCandidate]:
        matches: list[MatchCandidate] = []
        for record, name in prepared:
            scored = self._score(query, name, floor)
            if scored is None:
                continue
            match_type, similarity = scored
            similarity = round(similarity, SIMILARITY_PRECISION)
            matches.append(
                MatchCandidate(
                    matched_name=record.product_name,
                    store=record.store_name,
                    price=record.sale_price,
                    regular_price=record.regular_price,
                    similarity=similarity,
                    match_type=match_type,
                    confidence=self.confidence_for(similarity),
                    source_id=record.source_id,
                )
            )

        matches.sort(
            key=lambda m: (m.store.priority, m.match_type.rank, -m.similarity, m.price)
        )
        return matches

    def _score(
        self,
        query: _PreparedQuery,
        candidate: _PreparedName,
        floor: float,
    ) -> tuple[MatchType, float] | None:
        has_words = bool(query.name.form)
        left = query.name.form if has_words else query.name.normalized
        right = candidate.form if has_words else candidate.normalized
        if not left or not right:
            return None

        if left == right:
            return MatchType.EXACT, EXACT_SIMILARITY

        if left in right or right in left:
            ratio = min(len(left), len(right)) / max(len(left), len(right))
            return MatchType.CONTAINS, (
                CONTAINS_BASE_SIMILARITY + CONTAINS_RATIO_WEIGHT * ratio
            )

        # Punctuation-only or quantity-only queries stop at the contains tier
        if not has_words:
            return None

        matched = sum(
            1
            for equivalents, phrases in zip(query.equivalents, query.phrases)
            if equivalents & candidate.tokens
            or any(set(phrase) <= candidate.bases for phrase in phrases)
        )
        if matched:
            return MatchType.SEMANTIC, (
                SEMANTIC_MAX_SIMILARITY * matched / len(query.words)
            )

        score = Levenshtein.normalized_similarity(left, right)
        if score >= floor:
            return MatchType.FUZZY, score
        return None
