"""Tests for collection-wide search."""

import pytest

from training_coach.models import ValidationError
from training_coach.search import SearchFilters, SearchHit, search_cards


@pytest.fixture
def cards(make_item):
    return [
        make_item("s1", "Keep left shoulder down", helpfulness_score=1, created_at=10,
                  tags={"upper-body"}),
        make_item("s2", "Shoulders stay level through the spin", helpfulness_score=4,
                  created_at=20),
        make_item("s3", "Keep left sholder down and back", helpfulness_score=9, created_at=30,
                  section_title="Theory"),
        make_item("j1", "Bend your knees before takeoff", deck_id="waltz",
                  deck_name="Waltz Jump", discipline="Jumps", created_at=40, tags={"load"}),
    ]


class TestSearchCards:
    """Test matching and ordering of search hits."""

    def test_exact_before_fuzzy(self, cards):
        """Test that substring hits come before fuzzy-only hits."""
        hits = search_cards("left shoulder down", cards, 60)
        ids = [h.item.id for h in hits]

        assert ids[0] == "s1"
        assert hits[0].exact_match
        assert "s3" in ids
        assert not next(h for h in hits if h.item.id == "s3").exact_match
        assert "j1" not in ids

    def test_tag_hit_is_exact(self, cards):
        """Test that a query found in a tag counts as an exact hit."""
        hits = search_cards("load", cards, 60)
        assert [h.item.id for h in hits] == ["j1"]
        assert hits[0].exact_match

    def test_exact_hits_ordered_by_similarity_then_helpfulness(self, make_item):
        """Test that equally similar hits are ordered by helpfulness."""
        items = [
            make_item("a", "Hold the edge", helpfulness_score=1),
            make_item("b", "Hold the edge", helpfulness_score=5),
        ]
        hits = search_cards("hold the edge", items, 60)
        assert [h.item.id for h in hits] == ["b", "a"]

    def test_empty_query_returns_newest_first(self, cards):
        """Test that a blank query lists every card by creation time."""
        hits = search_cards("", cards, 60)
        assert [h.item.id for h in hits] == ["j1", "s3", "s2", "s1"]
        assert all(isinstance(h, SearchHit) for h in hits)

    def test_non_string_query_rejected(self, cards):
        """Test that a non-string query raises ValidationError."""
        with pytest.raises(ValidationError):
            search_cards(42, cards, 60)

    @pytest.mark.parametrize("threshold", ["60", None, 150, -5, False])
    def test_bad_threshold_rejected(self, cards, threshold):
        """Test that thresholds outside 0-100 or of the wrong type raise ValidationError."""
        with pytest.raises(ValidationError, match="threshold"):
            search_cards("shoulder", cards, threshold)

    def test_malformed_card_rejected(self, cards):
        """Test that a dict among the cards raises ValidationError naming its index."""
        with pytest.raises(ValidationError, match=r"cards\[1\]"):
            search_cards("shoulder", [cards[0], {"content": "Keep left shoulder down"}], 60)

    def test_malformed_card_rejected_for_empty_query(self, cards):
        """Test that card checks also run when the query is blank."""
        with pytest.raises(ValidationError):
            search_cards("", [{"content": "x"}], 60)


class TestSearchFilters:
    """Test narrowing by deck, section, discipline, tags and dates."""

    def test_discipline(self, cards):
        """Test that only cards of the chosen discipline remain."""
        hits = search_cards("", cards, 60, SearchFilters(discipline="Jumps"))
        assert [h.item.id for h in hits] == ["j1"]

    def test_deck(self, cards):
        """Test that only cards of the chosen deck remain."""
        hits = search_cards("", cards, 60, SearchFilters(deck_id="backspin"))
        assert {h.item.id for h in hits} == {"s1", "s2", "s3"}

    def test_section_title(self, cards):
        """Test that only cards in the named section remain."""
        hits = search_cards("", cards, 60, SearchFilters(section_title="Theory"))
        assert [h.item.id for h in hits] == ["s3"]

    def test_tags(self, cards):
        """Test that a card carrying any of the tags is kept."""
        hits = search_cards("", cards, 60, SearchFilters(tags=("upper-body", "load")))
        assert [h.item.id for h in hits] == ["j1", "s1"]

    def test_date_range_inclusive(self, cards):
        """Test that both ends of the date range are included."""
        hits = search_cards("", cards, 60, SearchFilters(date_range=(20, 30)))
        assert [h.item.id for h in hits] == ["s3", "s2"]
