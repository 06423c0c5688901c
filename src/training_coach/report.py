"""Reporting utilities for duplicate checks, searches and priority lists."""

from __future__ import annotations

from dataclasses import asdict
from typing import Iterable, List, Sequence

from .detect_duplicates import InternalDuplicate, group_by_deck
from .ingest import write_csv
from .models import CardWithContext, SimilarityResult
from .search import SearchHit


def _preview(text: str, width: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


def duplicate_rows(draft: str, results: Iterable[SimilarityResult]) -> List[dict]:
    rows = []
    for r in results:
        row = {"draft": draft}
        row.update(asdict(r))
        row["similarity"] = round(r.similarity, 1)
        rows.append(row)
    return rows


def internal_duplicate_rows(found: Iterable[InternalDuplicate]) -> List[dict]:
    rows = []
    for entry in found:
        for m in entry.matches:
            rows.append(
                {
                    "card_id": entry.item.id,
                    "deck_name": entry.item.deck_name,
                    "section_title": entry.item.section_title,
                    "content": entry.item.content,
                    "match_card_id": m.card_id,
                    "match_deck_name": m.deck_name,
                    "match_section_title": m.section_title,
                    "match_content": m.content,
                    "similarity": round(m.similarity, 1),
                }
            )
    return rows


def write_duplicates_csv(path: str, checks: Sequence[tuple]) -> None:
    """Write (draft, results) pairs to one CSV file."""
    rows: List[dict] = []
    for draft, results in checks:
        rows.extend(duplicate_rows(draft, results))
    write_csv(path, rows)


def write_internal_csv(path: str, found: Iterable[InternalDuplicate]) -> None:
    write_csv(path, internal_duplicate_rows(found))


def print_duplicate_summary(draft: str, results: Sequence[SimilarityResult]) -> None:
    """Print duplicate warnings for one draft, grouped by deck."""
    print(f"Draft: {_preview(draft)}")
    if not results:
        print("  No similar cards found")
        print()
        return
    for deck_name, group in group_by_deck(results).items():
        print(f"  Similar cards found in {deck_name or 'Unknown Deck'}:")
        for r in group:
            print(f"    {r.similarity:>5.1f}%  [{r.section_title}] {_preview(r.content)}")
    print()


def print_internal_summary(found: Sequence[InternalDuplicate], total: int) -> None:
    pairs = sum(len(entry.matches) for entry in found)
    print("Internal Duplicate Summary:")
    print(f"  cards checked   : {total}")
    print(f"  cards flagged   : {len(found)}")
    print(f"  matching pairs  : {pairs}")


def print_search_hits(query: str, hits: Sequence[SearchHit]) -> None:
    print(f"Search: {query!r} -> {len(hits)} card(s)")
    for h in hits:
        kind = "exact" if h.exact_match else f"{h.similarity:.0f}%"
        print(f"  {kind:>6}  {h.item.deck_name} / {h.item.section_title}: {_preview(h.item.content)}")


def print_priority_list(title: str, cards: Sequence[CardWithContext]) -> None:
    print(f"{title}:")
    if not cards:
        print("  (none)")
        return
    for idx, c in enumerate(cards, start=1):
        print(
            f"  {idx:>2}. [{c.helpfulness_score:>3}] {c.deck_name} ({c.discipline or '-'}): "
            f"{_preview(c.content)}"
        )
