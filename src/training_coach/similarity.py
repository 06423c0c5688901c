"""Similarity scoring between two pieces of card text.

The score (0-100) blends two signals so that both rephrasing and typos
register as similar:
- token overlap: share of words present on both sides, where a word also
  counts as shared when it is a close spelling of a word on the other side
- edit ratio: rapidfuzz's normalized Indel similarity of the full strings

Disjoint vocabularies score 0, identical normalized text scores 100 and
empty text scores 0 against anything.
"""

from __future__ import annotations

from typing import Sequence

from rapidfuzz import fuzz

from .models import ValidationError
from .normalize import normalize_for_match

TOKEN_WEIGHT = 0.5
EDIT_WEIGHT = 0.5

# Tokens shorter than this only ever match exactly ("on" vs "in").
MIN_FUZZY_TOKEN_LENGTH = 4
TOKEN_MATCH_RATIO = 80.0


def _check_text(name: str, value: object) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {type(value).__name__}")


def _tokens_match(a: str, b: str) -> bool:
    if a == b:
        return True
    if len(a) < MIN_FUZZY_TOKEN_LENGTH or len(b) < MIN_FUZZY_TOKEN_LENGTH:
        return False
    return fuzz.ratio(a, b) >= TOKEN_MATCH_RATIO


def _shared_count(tokens: Sequence[str], others: Sequence[str]) -> int:
    lookup = set(others)
    count = 0
    for token in tokens:
        if token in lookup or any(_tokens_match(token, other) for other in others):
            count += 1
    return count


def token_overlap(a: str, b: str) -> float:
    """Fraction (0.0-1.0) of distinct words shared between two normalized texts."""
    tokens_a = sorted(set(a.split()))
    tokens_b = sorted(set(b.split()))
    if not tokens_a or not tokens_b:
        return 0.0
    shared = _shared_count(tokens_a, tokens_b) + _shared_count(tokens_b, tokens_a)
    return shared / (len(tokens_a) + len(tokens_b))


def edit_ratio(a: str, b: str) -> float:
    """Normalized edit similarity (0-100) of two normalized texts."""
    if not a or not b:
        return 0.0
    return float(fuzz.ratio(a, b))


def score(a: str, b: str) -> float:
    """Return how similar two card texts are, from 0 to 100.

    Symmetric, 100 for identical normalized text, 0 when either side is
    empty after normalization or the two share no words.

    Raises:
        ValidationError: If either argument is not a string
    """
    _check_text("a", a)
    _check_text("b", b)
    na = normalize_for_match(a)
    nb = normalize_for_match(b)
    if not na or not nb:
        return 0.0
    if na == nb:
        return 100.0

    overlap = token_overlap(na, nb)
    if overlap == 0.0:
        return 0.0
    blended = TOKEN_WEIGHT * overlap * 100.0 + EDIT_WEIGHT * edit_ratio(na, nb)
    return min(100.0, max(0.0, blended))
