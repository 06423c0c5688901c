"""Priority retrieval and ranking for dashboard reminders.

Ranking rule, shared by every view:
- helpfulness score, highest first
- recency (last upvote, or creation when never voted), newest first
- card id, ascending, so equal cards still come out in a fixed order

Truncation to the caller's limit always happens after ranking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from .models import DISCIPLINES, Card, CardWithContext, ValidationError, check_items, check_limit

DEFAULT_EXCLUDED_SECTIONS: Tuple[str, ...] = ("Troubleshooting", "Theory", "Core Reminders")
DEFAULT_RESTRICTED_VIEW_SECTIONS: Tuple[str, ...] = ("Troubleshooting", "Theory")
DEFAULT_PRIORITY_LIMIT = 20
DEFAULT_OTHER_DISCIPLINE_LIMIT = 5

VIEW_MODES = ("recent", "helpful", "priority")

Rankable = TypeVar("Rankable", Card, CardWithContext)


@dataclass(frozen=True)
class PriorityFilter:
    discipline: Optional[str] = None
    limit: int = DEFAULT_PRIORITY_LIMIT

    def __post_init__(self) -> None:
        if self.discipline is not None and self.discipline not in DISCIPLINES:
            raise ValidationError(
                f"discipline must be one of {list(DISCIPLINES)}, got {self.discipline!r}"
            )
        check_limit(self.limit)


def ranking_key(card: Union[Card, CardWithContext]) -> Tuple[int, int]:
    return (card.helpfulness_score, card.recency)


def rank_cards(cards: Iterable[Rankable]) -> List[Rankable]:
    """Sort by ranking_key descending, then id ascending."""
    return sorted(cards, key=lambda c: (-c.helpfulness_score, -c.recency, c.id))


def get_prioritized(
    cards: Iterable[CardWithContext],
    priority_filter: PriorityFilter,
    excluded_sections: Iterable[str] = DEFAULT_EXCLUDED_SECTIONS,
) -> List[CardWithContext]:
    """Return the top priority cards for one discipline (or all when None).

    Args:
        cards: Every card in the collection with its deck context
        priority_filter: Discipline restriction and result limit
        excluded_sections: Section titles whose cards never surface here

    Returns:
        At most ``limit`` priority cards, ranked
    """
    cards = list(cards)
    check_items("cards", cards)
    excluded = frozenset(excluded_sections)
    eligible = [
        c for c in cards
        if c.priority
        and (priority_filter.discipline is None or c.discipline == priority_filter.discipline)
        and c.section_title not in excluded
    ]
    return rank_cards(eligible)[: priority_filter.limit]


def get_other_discipline_priorities(
    cards: Iterable[CardWithContext],
    focus: str,
    *,
    per_discipline_limit: int = DEFAULT_OTHER_DISCIPLINE_LIMIT,
    limit: int = DEFAULT_OTHER_DISCIPLINE_LIMIT,
    excluded_sections: Iterable[str] = DEFAULT_EXCLUDED_SECTIONS,
    disciplines: Sequence[str] = DISCIPLINES,
) -> List[CardWithContext]:
    """Priority reminders from every discipline except ``focus``.

    Each other discipline contributes its own ranked top ``per_discipline_limit``;
    the merged list is ranked again and cut to ``limit``.
    """
    if focus not in disciplines:
        raise ValidationError(f"focus must be one of {list(disciplines)}, got {focus!r}")
    check_limit(limit)
    cards = list(cards)
    check_items("cards", cards)
    excluded = frozenset(excluded_sections)

    merged: List[CardWithContext] = []
    for discipline in disciplines:
        if discipline == focus:
            continue
        merged.extend(
            get_prioritized(
                cards,
                PriorityFilter(discipline=discipline, limit=per_discipline_limit),
                excluded,
            )
        )
    return rank_cards(merged)[:limit]


def order_for_view(
    cards: Iterable[Card],
    mode: str,
    section_title: Optional[str] = None,
    restricted_sections: Iterable[str] = DEFAULT_RESTRICTED_VIEW_SECTIONS,
) -> List[Card]:
    """Order one section's cards for the deck list view.

    Modes:
        recent: newest first
        helpful: ranking rule
        priority: priority cards only (none for restricted sections), ranking rule
    """
    if mode not in VIEW_MODES:
        raise ValidationError(f"mode must be one of {list(VIEW_MODES)}, got {mode!r}")
    cards = list(cards)
    if mode == "recent":
        return sorted(cards, key=lambda c: (-c.created_at, c.id))
    if mode == "helpful":
        return rank_cards(cards)
    if section_title is not None and section_title in frozenset(restricted_sections):
        return []
    return rank_cards(c for c in cards if c.priority)
