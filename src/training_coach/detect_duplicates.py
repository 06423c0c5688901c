"""Duplicate detection for draft cards against existing cards.

A draft is compared with every candidate; candidates scoring at or above the
caller's threshold are returned as SimilarityResult, most similar first.
Callers own the candidate set: drop the card being edited (exclude_card) and
narrow by tag group (candidates_with_tags) before calling find_similar.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .models import (
    CardWithContext,
    SimilarityResult,
    ValidationError,
    check_items,
    check_limit,
    check_threshold,
)
from .normalize import normalize_for_match
from .similarity import score

MIN_DRAFT_LENGTH = 3


@dataclass(frozen=True)
class InternalDuplicate:
    """A collection card together with the other cards it resembles."""
    item: CardWithContext
    matches: List[SimilarityResult]


def _result_order(result: SimilarityResult):
    return (-result.similarity, -result.helpfulness_score, result.card_id)


def to_result(item: CardWithContext, similarity: float) -> SimilarityResult:
    return SimilarityResult(
        card_id=item.id,
        content=item.content,
        deck_id=item.deck_id,
        section_id=item.section_id,
        section_title=item.section_title,
        deck_name=item.deck_name,
        similarity=similarity,
        card_date=item.created_at,
        helpfulness_score=item.helpfulness_score,
    )


def find_similar(
    draft_text: str,
    candidates: Iterable[CardWithContext],
    threshold: float,
    *,
    min_length: int = MIN_DRAFT_LENGTH,
    limit: Optional[int] = None,
) -> List[SimilarityResult]:
    """Find existing cards that look like ``draft_text``.

    Args:
        draft_text: Text of the card being composed
        candidates: Cards to compare against (card being edited already removed)
        threshold: Minimum similarity (0-100) for a candidate to be reported
        min_length: Drafts shorter than this (after trimming) yield no results
        limit: Keep only the top ``limit`` results after sorting

    Returns:
        Results sorted by similarity desc, then helpfulness desc, then card id

    Raises:
        ValidationError: On non-string draft, bad threshold or malformed candidates
    """
    if not isinstance(draft_text, str):
        raise ValidationError(
            f"draft_text must be a string, got {type(draft_text).__name__}"
        )
    check_threshold(threshold)
    if limit is not None:
        check_limit(limit)
    candidates = list(candidates)
    check_items("candidates", candidates)

    if len(draft_text.strip()) < min_length or not normalize_for_match(draft_text):
        return []

    results: List[SimilarityResult] = []
    for item in candidates:
        sim = score(draft_text, item.content)
        if sim >= threshold:
            results.append(to_result(item, sim))

    results.sort(key=_result_order)
    if limit is not None:
        results = results[:limit]
    return results


def group_by_deck(results: Iterable[SimilarityResult]) -> Dict[str, List[SimilarityResult]]:
    """Group results by deck name, keeping first-appearance order of decks."""
    groups: Dict[str, List[SimilarityResult]] = OrderedDict()
    for r in results:
        groups.setdefault(r.deck_name, []).append(r)
    return groups


def sort_by_recency(results: Iterable[SimilarityResult]) -> List[SimilarityResult]:
    """Newest cards first; card id breaks ties."""
    return sorted(results, key=lambda r: (-r.card_date, r.card_id))


def exclude_card(candidates: Iterable[CardWithContext], card_id: str) -> List[CardWithContext]:
    return [c for c in candidates if c.id != card_id]


def candidates_with_tags(
    candidates: Iterable[CardWithContext],
    required_tag: Optional[str] = None,
    any_of: Iterable[str] = (),
) -> List[CardWithContext]:
    """Narrow candidates to the draft's tag group.

    A candidate is kept when it carries ``required_tag`` (if given) and at
    least one of ``any_of`` (if non-empty).
    """
    any_of = set(any_of)
    kept: List[CardWithContext] = []
    for c in candidates:
        if required_tag and required_tag not in c.tags:
            continue
        if any_of and not (any_of & c.tags):
            continue
        kept.append(c)
    return kept


def find_internal_duplicates(
    cards: Iterable[CardWithContext],
    threshold: float,
) -> List[InternalDuplicate]:
    """Analyze a collection for cards that duplicate other cards in it.

    Each card is compared with every other card; matches sharing the card's
    own id are excluded. Only cards with at least one match are returned,
    in collection order.
    """
    check_threshold(threshold)
    cards = list(cards)
    check_items("cards", cards)

    found: List[InternalDuplicate] = []
    for item in cards:
        others = exclude_card(cards, item.id)
        matches = find_similar(item.content, others, threshold, min_length=0)
        if matches:
            found.append(InternalDuplicate(item=item, matches=matches))
    return found
