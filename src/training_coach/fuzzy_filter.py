"""Per-card search predicate for filtered deck views.

A card passes when the query is a substring of its content, a substring of
one of its tags, or fuzzily similar to the content. An empty query passes
every card. The predicate is stateless so callers can chain their own
sorts and filters afterwards.
"""

from __future__ import annotations

from typing import Iterable, List

from .models import Card, ValidationError, check_threshold
from .normalize import normalize_for_match
from .similarity import score


def _check_query(query: object) -> None:
    if not isinstance(query, str):
        raise ValidationError(f"query must be a string, got {type(query).__name__}")


def content_contains(query: str, card: Card) -> bool:
    nq = normalize_for_match(query)
    return bool(nq) and nq in normalize_for_match(card.content)


def tag_contains(query: str, card: Card) -> bool:
    q = query.strip().casefold()
    return bool(q) and any(q in tag.casefold() for tag in card.tags)


def matches(query: str, card: Card, threshold: float) -> bool:
    """Decide whether ``card`` should be shown for search ``query``.

    Raises:
        ValidationError: On a non-string query, a non-Card card or a bad threshold
    """
    _check_query(query)
    check_threshold(threshold)
    if not isinstance(card, Card):
        raise ValidationError(f"card must be a Card, got {type(card).__name__}")
    if not query.strip():
        return True
    if content_contains(query, card) or tag_contains(query, card):
        return True
    return score(query, card.content) >= threshold


def filter_cards(query: str, cards: Iterable[Card], threshold: float) -> List[Card]:
    """Keep matching cards in their original order."""
    _check_query(query)
    check_threshold(threshold)
    return [c for c in cards if matches(query, c, threshold)]
