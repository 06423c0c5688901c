"""Value types shared by the similarity, search and ranking modules.

Containment is strict: a Card belongs to one Section, a Section to one Deck.
Cross-deck operations work on CardWithContext, a card paired with the
denormalized deck/section it lives in.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple

DISCIPLINES: Tuple[str, ...] = ("Spins", "Jumps", "Edges")


class ValidationError(ValueError):
    """Raised when engine input does not match the data model."""


def _require_str(owner: str, name: str, value: object, allow_empty: bool = True) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{owner}.{name} must be a string, got {type(value).__name__}")
    if not allow_empty and not value.strip():
        raise ValidationError(f"{owner}.{name} must not be empty")


def _require_int(owner: str, name: str, value: object) -> None:
    # bool is an int subclass; reject it so flags and counters don't mix
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{owner}.{name} must be an integer, got {type(value).__name__}")


def _require_bool(owner: str, name: str, value: object) -> None:
    if not isinstance(value, bool):
        raise ValidationError(f"{owner}.{name} must be a boolean, got {type(value).__name__}")


def check_threshold(threshold: object) -> None:
    """Reject anything but a number between 0 and 100."""
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValidationError(f"threshold must be a number, got {type(threshold).__name__}")
    if not 0 <= threshold <= 100:
        raise ValidationError(f"threshold must be between 0 and 100, got {threshold}")


def check_limit(limit: object) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValidationError(f"limit must be a non-negative integer, got {limit!r}")


def check_items(name: str, items: Iterable[object]) -> None:
    """Every entry must be a CardWithContext."""
    for idx, item in enumerate(items):
        if not isinstance(item, CardWithContext):
            raise ValidationError(
                f"{name}[{idx}] must be a CardWithContext, got {type(item).__name__}"
            )


def _freeze_tags(owner: str, tags: Iterable[str]) -> frozenset:
    if isinstance(tags, str):
        raise ValidationError(f"{owner}.tags must be a collection of strings, not a string")
    frozen = frozenset(tags)
    for tag in frozen:
        _require_str(owner, "tags[]", tag)
    return frozen


@dataclass(frozen=True)
class Card:
    """A single piece of advice stored in one section.

    Attributes:
        id: Stable unique identifier
        section_id: Owning section
        content: Free-form advice text
        tags: Unordered labels
        priority: User-set flag for dashboard surfacing
        helpfulness_score: Vote count, never negative
        created_at: Creation time (Unix ms)
        last_upvoted_at: Time of the last helpfulness change, if any
        marked_for_merge: Cleanup workflow flag
    """
    id: str
    section_id: str
    content: str
    created_at: int
    tags: frozenset = field(default_factory=frozenset)
    priority: bool = False
    helpfulness_score: int = 0
    last_upvoted_at: Optional[int] = None
    marked_for_merge: bool = False

    def __post_init__(self) -> None:
        _require_str("Card", "id", self.id, allow_empty=False)
        _require_str("Card", "section_id", self.section_id)
        _require_str("Card", "content", self.content)
        _require_int("Card", "created_at", self.created_at)
        object.__setattr__(self, "tags", _freeze_tags("Card", self.tags))
        _require_bool("Card", "priority", self.priority)
        _require_int("Card", "helpfulness_score", self.helpfulness_score)
        if self.helpfulness_score < 0:
            raise ValidationError(
                f"Card.helpfulness_score must be >= 0, got {self.helpfulness_score}"
            )
        if self.last_upvoted_at is not None:
            _require_int("Card", "last_upvoted_at", self.last_upvoted_at)
        _require_bool("Card", "marked_for_merge", self.marked_for_merge)

    @property
    def recency(self) -> int:
        """Most recent of last reinforcement and creation."""
        if self.last_upvoted_at is None:
            return self.created_at
        return max(self.last_upvoted_at, self.created_at)

    def vote(self, delta: int, at: int) -> "Card":
        """Return a copy with helpfulness moved by ``delta`` (floored at 0)."""
        _require_int("Card.vote", "delta", delta)
        _require_int("Card.vote", "at", at)
        return replace(
            self,
            helpfulness_score=max(0, self.helpfulness_score + delta),
            last_upvoted_at=at,
        )

    def with_priority(self, priority: bool) -> "Card":
        return replace(self, priority=priority)


@dataclass(frozen=True)
class Section:
    id: str
    title: str
    cards: Tuple[Card, ...] = ()

    def __post_init__(self) -> None:
        _require_str("Section", "id", self.id, allow_empty=False)
        _require_str("Section", "title", self.title)
        object.__setattr__(self, "cards", tuple(self.cards))
        for card in self.cards:
            if not isinstance(card, Card):
                raise ValidationError(f"Section.cards must contain Card, got {type(card).__name__}")


@dataclass(frozen=True)
class Deck:
    id: str
    name: str
    discipline: Optional[str] = None
    sections: Tuple[Section, ...] = ()
    tags: Tuple[str, ...] = ()
    created_at: int = 0
    updated_at: int = 0

    def __post_init__(self) -> None:
        _require_str("Deck", "id", self.id, allow_empty=False)
        _require_str("Deck", "name", self.name)
        if self.discipline is not None and self.discipline not in DISCIPLINES:
            raise ValidationError(
                f"Deck.discipline must be one of {list(DISCIPLINES)}, got {self.discipline!r}"
            )
        object.__setattr__(self, "sections", tuple(self.sections))
        object.__setattr__(self, "tags", tuple(self.tags))
        for section in self.sections:
            if not isinstance(section, Section):
                raise ValidationError(
                    f"Deck.sections must contain Section, got {type(section).__name__}"
                )


@dataclass(frozen=True)
class DeckContext:
    """Where a card lives, denormalized for cross-deck operations."""
    deck_id: str
    deck_name: str
    section_id: str
    section_title: str
    discipline: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("deck_id", "deck_name", "section_id", "section_title"):
            _require_str("DeckContext", name, getattr(self, name))
        if self.discipline is not None:
            _require_str("DeckContext", "discipline", self.discipline)


@dataclass(frozen=True)
class CardWithContext:
    card: Card
    context: DeckContext

    def __post_init__(self) -> None:
        if not isinstance(self.card, Card):
            raise ValidationError(
                f"CardWithContext.card must be a Card, got {type(self.card).__name__}"
            )
        if not isinstance(self.context, DeckContext):
            raise ValidationError(
                f"CardWithContext.context must be a DeckContext, got {type(self.context).__name__}"
            )

    @property
    def id(self) -> str:
        return self.card.id

    @property
    def content(self) -> str:
        return self.card.content

    @property
    def tags(self) -> frozenset:
        return self.card.tags

    @property
    def priority(self) -> bool:
        return self.card.priority

    @property
    def helpfulness_score(self) -> int:
        return self.card.helpfulness_score

    @property
    def created_at(self) -> int:
        return self.card.created_at

    @property
    def recency(self) -> int:
        return self.card.recency

    @property
    def deck_id(self) -> str:
        return self.context.deck_id

    @property
    def deck_name(self) -> str:
        return self.context.deck_name

    @property
    def section_id(self) -> str:
        return self.context.section_id

    @property
    def section_title(self) -> str:
        return self.context.section_title

    @property
    def discipline(self) -> Optional[str]:
        return self.context.discipline


@dataclass(frozen=True)
class SimilarityResult:
    """Read-only projection of a candidate that scored above threshold."""
    card_id: str
    content: str
    deck_id: str
    section_id: str
    section_title: str
    deck_name: str
    similarity: float  # 0-100
    card_date: int
    helpfulness_score: int = 0
