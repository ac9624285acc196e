"""Text normalisation shared by keyword expansion and matching.

``normalize_text`` produces the canonical comparison form of any product
name: lower case, ligatures expanded, diacritics stripped, and every run of
non-alphanumeric characters collapsed to one space. ``matching_tokens``
further drops stop words, one-character tokens and pure quantity tokens so
that "Lait 2% 2L" and "lait" compare equal.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from promo_compare.services.keywords.constants import (
    BRANDS,
    QUANTITY_TOKEN_PATTERN,
    STOP_WORDS,
    SYNONYMS,
)


_LIGATURES: Final = str.maketrans({"œ": "oe", "æ": "ae", "ß": "ss"})
_NON_ALNUM: Final = re.compile(r"[^a-z0-9]+")
_MIN_TOKEN_LENGTH: Final[int] = 2
_PLURAL_SUFFIXES: Final[tuple[str, ...]] = ("s", "x")
_BRAND_NAMES: Final[frozenset[str]] = frozenset(BRANDS)

_PhraseIndex = Mapping[str, tuple[tuple[str, ...], ...]]


def strip_accents(text: str) -> str:
    """Lower-case ``text``, expand ligatures and drop combining marks."""
    lowered = text.lower().translate(_LIGATURES)
    decomposed = unicodedata.normalize("NFKD", lowered)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(text: str) -> str:
    """Canonical form: accent-free lower case words separated by one space."""
    return _NON_ALNUM.sub(" ", strip_accents(text)).strip()


def is_significant(token: str) -> bool:
    """True for tokens worth searching on (not a stop word, not a bare number)."""
    return (
        len(token) >= _MIN_TOKEN_LENGTH
        and token not in STOP_WORDS
        and not token.isdigit()
    )


def significant_tokens(normalized: str) -> list[str]:
    """Split an already normalised string and keep significant tokens in order."""
    return [token for token in normalized.split() if is_significant(token)]


def matching_tokens(text: str) -> list[str]:
    """Tokens used to compare two product names, quantities removed."""
    return [
        token
        for token in significant_tokens(normalize_text(text))
        if not QUANTITY_TOKEN_PATTERN.match(token)
    ]


def matching_form(text: str) -> str:
    """Space-joined ``matching_tokens``; empty when nothing significant remains."""
    return " ".join(matching_tokens(text))


def singular(token: str) -> str:
    """Drop a trailing plural ``s``/``x`` from tokens longer than three characters."""
    if len(token) > 3 and token.endswith(_PLURAL_SUFFIXES):
        return token[:-1]
    return token


def _build_equivalence_index(
    synonyms: Mapping[str, tuple[str, ...]],
) -> tuple[Mapping[str, frozenset[str]], _PhraseIndex]:
    words: dict[str, set[str]] = {}
    phrases: dict[str, list[tuple[str, ...]]] = {}

    for term, values in synonyms.items():
        key = singular(term)
        for value in values:
            raw = matching_tokens(value)
            if not raw or " ".join(raw) in _BRAND_NAMES:
                continue
            tokens = tuple(singular(t) for t in raw)
            if len(tokens) > 1:
                bucket = phrases.setdefault(key, [])
                if tokens not in bucket:
                    bucket.append(tokens)
                continue
            other = tokens[0]
            if other != key:
                words.setdefault(key, set()).add(other)
                words.setdefault(other, set()).add(key)

    return (
        MappingProxyType({k: frozenset(v) for k, v in words.items()}),
        MappingProxyType({k: tuple(v) for k, v in phrases.items()}),
    )


_WORD_EQUIVALENTS, _PHRASE_EQUIVALENTS = _build_equivalence_index(SYNONYMS)


def equivalent_tokens(token: str) -> frozenset[str]:
    """Single-word forms treated as the same product word as ``token``.

    Includes the token, its singular and plural forms, and every one-word
    synonym or translation in either direction.
    """
    base = singular(token)
    forms = {token, base}
    for related in _WORD_EQUIVALENTS.get(base, ()):
        forms.add(related)
    for form in list(forms):
        forms.update(form + suffix for suffix in _PLURAL_SUFFIXES)
    return frozenset(forms)


def equivalent_phrases(token: str) -> tuple[tuple[str, ...], ...]:
    """Multi-word synonyms of ``token`` as singular token tuples.

    "patate" yields ``("pomme", "terre")`` among others.
    """
    return _PHRASE_EQUIVALENTS.get(singular(token), ())
