"""Collection-wide text and tag search.

Cards are first narrowed by SearchFilters, then matched with the same rules
as the deck view filter. Hits are ordered:
1. exact (substring) matches before fuzzy ones
2. similarity, highest first
3. helpfulness, highest first
4. card id
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .fuzzy_filter import content_contains, tag_contains
from .models import CardWithContext, ValidationError, check_items, check_threshold
from .similarity import score


@dataclass(frozen=True)
class SearchFilters:
    discipline: Optional[str] = None
    deck_id: Optional[str] = None
    section_title: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    date_range: Optional[Tuple[int, int]] = None  # inclusive created_at bounds

    def accepts(self, item: CardWithContext) -> bool:
        if self.discipline and item.discipline != self.discipline:
            return False
        if self.deck_id and item.deck_id != self.deck_id:
            return False
        if self.section_title and item.section_title != self.section_title:
            return False
        if self.tags and not any(t in item.tags for t in self.tags):
            return False
        if self.date_range is not None:
            start, end = self.date_range
            if not start <= item.created_at <= end:
                return False
        return True


@dataclass(frozen=True)
class SearchHit:
    item: CardWithContext
    exact_match: bool
    similarity: float


def _best_similarity(query: str, item: CardWithContext) -> float:
    best = score(query, item.content)
    for tag in item.tags:
        best = max(best, score(query, tag))
    return best


def search_cards(
    query: str,
    cards: Iterable[CardWithContext],
    threshold: float,
    filters: Optional[SearchFilters] = None,
) -> List[SearchHit]:
    """Search cards by content and tags.

    With an empty query every filtered card is returned, newest first.

    Raises:
        ValidationError: On a non-string query, a bad threshold or malformed cards
    """
    if not isinstance(query, str):
        raise ValidationError(f"query must be a string, got {type(query).__name__}")
    check_threshold(threshold)
    cards = list(cards)
    check_items("cards", cards)
    filters = filters or SearchFilters()
    pool = [c for c in cards if filters.accepts(c)]

    if not query.strip():
        pool.sort(key=lambda c: (-c.created_at, c.id))
        return [SearchHit(item=c, exact_match=False, similarity=0.0) for c in pool]

    hits: List[SearchHit] = []
    for item in pool:
        exact = content_contains(query, item.card) or tag_contains(query, item.card)
        sim = _best_similarity(query, item)
        if exact or sim >= threshold:
            hits.append(SearchHit(item=item, exact_match=exact, similarity=sim))

    hits.sort(key=lambda h: (not h.exact_match, -h.similarity, -h.item.helpfulness_score, h.item.id))
    return hits
