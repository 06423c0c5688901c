"""Shared fixtures for building cards with deck context."""

import pytest

from training_coach.models import Card, CardWithContext, DeckContext


def build_item(
    card_id,
    content,
    deck_id="backspin",
    deck_name="Backspin",
    section_title="Reminders",
    discipline="Spins",
    **card_fields,
):
    card_fields.setdefault("created_at", 1_700_000_000_000)
    section_id = f"{deck_id}-{section_title.lower().replace(' ', '-')}"
    card = Card(id=card_id, section_id=section_id, content=content, **card_fields)
    ctx = DeckContext(
        deck_id=deck_id,
        deck_name=deck_name,
        section_id=section_id,
        section_title=section_title,
        discipline=discipline,
    )
    return CardWithContext(card=card, context=ctx)


@pytest.fixture
def make_item():
    """Factory fixture returning CardWithContext objects."""
    return build_item
