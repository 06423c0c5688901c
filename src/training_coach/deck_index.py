"""In-memory collection snapshot built from a JSON export of the card store.

Expected export shape (field names as the store writes them):

    {"decks": [{"id", "name", "discipline", "tags", "createdAt", "updatedAt",
                "sections": [{"id", "title",
                              "cards": [{"id", "content", "tags", "priority",
                                         "helpfulnessScore", "createdAt",
                                         "lastUpvotedAt", "markedForMerge"}]}]}]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .models import Card, CardWithContext, Deck, DeckContext, Section, ValidationError


@dataclass
class Collection:
    decks: List[Deck] = field(default_factory=list)
    _by_id: Dict[str, Deck] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        decks = list(self.decks)
        self.decks = []
        for deck in decks:
            self.add_deck(deck)

    def add_deck(self, deck: Deck) -> None:
        if not isinstance(deck, Deck):
            raise ValidationError(f"Collection decks must be Deck, got {type(deck).__name__}")
        if deck.id in self._by_id:
            raise ValidationError(f"Duplicate deck id: {deck.id}")
        known = {c.id for c in self._iter_cards()}
        for section in deck.sections:
            for card in section.cards:
                if card.id in known:
                    raise ValidationError(f"Duplicate card id: {card.id}")
                known.add(card.id)
        self.decks.append(deck)
        self._by_id[deck.id] = deck

    def _iter_cards(self) -> Iterable[Card]:
        for deck in self.decks:
            for section in deck.sections:
                yield from section.cards

    def deck(self, deck_id: str) -> Deck:
        try:
            return self._by_id[deck_id]
        except KeyError:
            raise KeyError(f"Unknown deck id: {deck_id}") from None

    def cards_with_context(self, deck_id: Optional[str] = None) -> List[CardWithContext]:
        """Flatten decks/sections/cards in storage order."""
        decks = [self.deck(deck_id)] if deck_id is not None else self.decks
        out: List[CardWithContext] = []
        for deck in decks:
            for section in deck.sections:
                ctx = DeckContext(
                    deck_id=deck.id,
                    deck_name=deck.name,
                    section_id=section.id,
                    section_title=section.title,
                    discipline=deck.discipline,
                )
                out.extend(CardWithContext(card=card, context=ctx) for card in section.cards)
        return out

    def cards_for_deck(self, deck_id: str) -> List[CardWithContext]:
        return self.cards_with_context(deck_id)

    def find_card(self, card_id: str) -> Optional[CardWithContext]:
        for item in self.cards_with_context():
            if item.id == card_id:
                return item
        return None

    def __len__(self) -> int:
        return sum(1 for _ in self._iter_cards())


def _card_from_record(record: dict, section_id: str) -> Card:
    if not isinstance(record, dict):
        raise ValidationError(f"Card record must be an object, got {type(record).__name__}")
    missing = {"id", "content", "createdAt"} - set(record)
    if missing:
        raise ValidationError(
            f"Card record {record.get('id', '?')} is missing fields: {sorted(missing)}"
        )
    return Card(
        id=record["id"],
        section_id=record.get("sectionId", section_id),
        content=record["content"],
        created_at=record["createdAt"],
        tags=record.get("tags") or (),
        priority=record.get("priority", False),
        helpfulness_score=record.get("helpfulnessScore", 0),
        last_upvoted_at=record.get("lastUpvotedAt"),
        marked_for_merge=record.get("markedForMerge", False),
    )


def _deck_from_record(record: dict) -> Deck:
    if not isinstance(record, dict):
        raise ValidationError(f"Deck record must be an object, got {type(record).__name__}")
    if "id" not in record or "name" not in record:
        raise ValidationError(f"Deck record is missing 'id' or 'name': {record!r:.80}")
    sections = []
    for s in record.get("sections") or []:
        if not isinstance(s, dict) or "id" not in s:
            raise ValidationError(f"Section record in deck {record['id']} is missing 'id'")
        cards = tuple(_card_from_record(c, s["id"]) for c in s.get("cards") or [])
        sections.append(Section(id=s["id"], title=s.get("title", ""), cards=cards))
    return Deck(
        id=record["id"],
        name=record["name"],
        discipline=record.get("discipline"),
        sections=tuple(sections),
        tags=tuple(record.get("tags") or ()),
        created_at=record.get("createdAt", 0),
        updated_at=record.get("updatedAt", 0),
    )


def build_from_records(records: Iterable[dict]) -> Collection:
    return Collection([_deck_from_record(r) for r in records])


def load_collection(path: str | Path) -> Collection:
    """Load a collection from a JSON export.

    Raises:
        FileNotFoundError: If the export file doesn't exist
        ValueError: If the JSON is invalid or a record breaks the data model
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Collection export not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in collection export: {e}")
    if isinstance(data, list):
        records = data
    elif isinstance(data, dict):
        records = data.get("decks", [])
    else:
        raise ValueError("Collection export must be an object with 'decks' or a list of decks")
    return build_from_records(records)
