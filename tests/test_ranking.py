"""Tests for priority retrieval and ranking."""

import pytest

from training_coach.models import Card, ValidationError
from training_coach.ranking import (
    DEFAULT_EXCLUDED_SECTIONS,
    PriorityFilter,
    get_other_discipline_priorities,
    get_prioritized,
    order_for_view,
    rank_cards,
    ranking_key,
)


@pytest.fixture
def collection(make_item):
    """Priority and non-priority cards across three disciplines."""
    return [
        make_item("s1", "Spin reminder one", priority=True, helpfulness_score=5,
                  created_at=100, last_upvoted_at=900),
        make_item("s2", "Spin reminder two", priority=True, helpfulness_score=5,
                  created_at=200, last_upvoted_at=500),
        make_item("s3", "Spin reminder three", priority=True, helpfulness_score=1, created_at=300),
        make_item("s4", "Spin not priority", priority=False, helpfulness_score=50, created_at=300),
        make_item("s5", "Spin theory", priority=True, helpfulness_score=40, created_at=300,
                  section_title="Theory"),
        make_item("s6", "Spin core", priority=True, helpfulness_score=40, created_at=300,
                  section_title="Core Reminders"),
        make_item("s7", "Spin exercise", priority=True, helpfulness_score=2, created_at=700,
                  section_title="Exercises"),
        make_item("j1", "Jump reminder", priority=True, helpfulness_score=7, created_at=100,
                  deck_id="waltz", deck_name="Waltz Jump", discipline="Jumps"),
        make_item("j2", "Jump reminder two", priority=True, helpfulness_score=2, created_at=100,
                  deck_id="waltz", deck_name="Waltz Jump", discipline="Jumps"),
        make_item("e1", "Edge reminder", priority=True, helpfulness_score=3, created_at=100,
                  deck_id="three", deck_name="Three Turn", discipline="Edges"),
        make_item("e2", "Edge troubleshooting", priority=True, helpfulness_score=30,
                  created_at=100, deck_id="three", deck_name="Three Turn", discipline="Edges",
                  section_title="Troubleshooting"),
    ]


class TestRankingKey:
    """Test the ranking key and its tie-break."""

    def test_recency_uses_last_upvote(self):
        """Test that the key uses the last upvote when present."""
        card = Card(id="a", section_id="s", content="x", created_at=10, last_upvoted_at=50)
        assert ranking_key(card) == (0, 50)

    def test_recency_falls_back_to_creation(self):
        """Test that the key falls back to creation time."""
        card = Card(id="a", section_id="s", content="x", created_at=10, helpfulness_score=2)
        assert ranking_key(card) == (2, 10)

    def test_ties_broken_by_id(self):
        """Test that otherwise equal cards are ordered by id."""
        cards = [
            Card(id="b", section_id="s", content="x", created_at=1),
            Card(id="a", section_id="s", content="x", created_at=1),
        ]
        assert [c.id for c in rank_cards(cards)] == ["a", "b"]


class TestGetPrioritized:
    """Test dashboard priority retrieval."""

    def test_only_priority_cards_of_discipline(self, collection):
        """Test that only priority cards of the discipline are returned."""
        result = get_prioritized(collection, PriorityFilter(discipline="Spins", limit=20))

        assert result
        assert all(c.priority for c in result)
        assert all(c.discipline == "Spins" for c in result)

    def test_excluded_sections_dropped(self, collection):
        """Test that cards in excluded sections never surface."""
        result = get_prioritized(collection, PriorityFilter(discipline="Spins"))
        assert {c.section_title for c in result}.isdisjoint(DEFAULT_EXCLUDED_SECTIONS)
        assert [c.id for c in result] == ["s1", "s2", "s7", "s3"]

    def test_later_upvote_wins_tie(self, collection):
        """Test that equal helpfulness is broken by the most recent reinforcement."""
        result = get_prioritized(collection, PriorityFilter(discipline="Spins"))
        ids = [c.id for c in result]
        assert ids.index("s1") < ids.index("s2")

    def test_limit_applied_after_ranking(self, make_item):
        """Test that the limit keeps the best cards, not the first ones."""
        cards = [
            make_item(f"c{i}", f"Reminder {i}", priority=True, helpfulness_score=score, created_at=i)
            for i, score in enumerate([1, 9, 3, 7, 5])
        ]
        result = get_prioritized(cards, PriorityFilter(discipline="Spins", limit=2))
        assert [c.id for c in result] == ["c1", "c3"]

    def test_sorted_by_ranking_key(self, collection):
        """Test that results are sorted by the ranking key."""
        result = get_prioritized(collection, PriorityFilter(limit=50))
        keys = [ranking_key(c) for c in result]
        assert keys == sorted(keys, reverse=True)

    def test_all_disciplines_when_none(self, collection):
        """Test that no discipline means every discipline."""
        result = get_prioritized(collection, PriorityFilter(discipline=None, limit=50))
        assert {c.discipline for c in result} == {"Spins", "Jumps", "Edges"}

    def test_custom_exclusion_policy(self, collection):
        """Test that callers can supply their own excluded sections."""
        result = get_prioritized(collection, PriorityFilter(discipline="Spins"), excluded_sections={"Exercises"})
        ids = [c.id for c in result]
        assert "s7" not in ids
        assert ids[:2] == ["s5", "s6"]

    def test_zero_limit(self, collection):
        """Test that a zero limit returns nothing."""
        assert get_prioritized(collection, PriorityFilter(discipline="Spins", limit=0)) == []

    def test_empty_input(self):
        """Test that an empty collection returns nothing."""
        assert get_prioritized([], PriorityFilter(discipline="Spins")) == []

    def test_idempotent(self, collection):
        """Test that repeated calls return the same list."""
        f = PriorityFilter(discipline="Spins", limit=3)
        assert get_prioritized(collection, f) == get_prioritized(collection, f)

    @pytest.mark.parametrize("kwargs", [{"discipline": "Dance"}, {"limit": -1}, {"limit": "5"}])
    def test_bad_filter_rejected(self, kwargs):
        """Test that a bad discipline or limit raises ValidationError."""
        with pytest.raises(ValidationError):
            PriorityFilter(**kwargs)

    def test_malformed_cards_rejected(self, collection):
        """Test that a non-CardWithContext entry raises ValidationError."""
        with pytest.raises(ValidationError):
            get_prioritized([collection[0], "card"], PriorityFilter())


class TestOtherDisciplines:
    """Test reminders merged from other disciplines."""

    def test_merges_other_disciplines(self, collection):
        """Test that other disciplines are merged and ranked together."""
        result = get_other_discipline_priorities(collection, "Spins", per_discipline_limit=5, limit=5)
        assert [c.id for c in result] == ["j1", "e1", "j2"]

    def test_per_discipline_limit(self, collection):
        """Test that each discipline contributes at most its own limit."""
        result = get_other_discipline_priorities(collection, "Spins", per_discipline_limit=1, limit=5)
        assert [c.id for c in result] == ["j1", "e1"]

    def test_overall_limit(self, collection):
        """Test that the merged list is cut to the overall limit."""
        result = get_other_discipline_priorities(collection, "Jumps", limit=2)
        assert [c.id for c in result] == ["s1", "s2"]

    def test_unknown_focus_rejected(self, collection):
        """Test that an unknown focus discipline raises ValidationError."""
        with pytest.raises(ValidationError):
            get_other_discipline_priorities(collection, "Dance")

    @pytest.mark.parametrize("limit", [-1, True, "5"])
    def test_bad_limit_rejected(self, collection, limit):
        """Test that a negative, boolean or non-integer limit raises ValidationError."""
        with pytest.raises(ValidationError, match="limit"):
            get_other_discipline_priorities(collection, "Spins", limit=limit)

    def test_malformed_cards_rejected(self, collection):
        """Test that a non-CardWithContext entry raises ValidationError."""
        with pytest.raises(ValidationError, match=r"cards\[1\]"):
            get_other_discipline_priorities([collection[0], {"id": "x"}], "Jumps")


class TestOrderForView:
    """Test deck view orderings."""

    @pytest.fixture
    def cards(self):
        return [
            Card(id="a", section_id="s", content="x", created_at=30, helpfulness_score=1),
            Card(id="b", section_id="s", content="x", created_at=10, helpfulness_score=5, priority=True),
            Card(id="c", section_id="s", content="x", created_at=20, helpfulness_score=3, priority=True),
        ]

    def test_recent(self, cards):
        """Test the newest-first view."""
        assert [c.id for c in order_for_view(cards, "recent")] == ["a", "c", "b"]

    def test_helpful(self, cards):
        """Test the most-helpful view."""
        assert [c.id for c in order_for_view(cards, "helpful")] == ["b", "c", "a"]

    def test_priority(self, cards):
        """Test that the priority view keeps only priority cards."""
        assert [c.id for c in order_for_view(cards, "priority", "Reminders")] == ["b", "c"]

    def test_priority_restricted_section(self, cards):
        """Test that restricted sections have an empty priority view."""
        assert order_for_view(cards, "priority", "Troubleshooting") == []

    def test_unknown_mode(self, cards):
        """Test that an unknown view mode raises ValidationError."""
        with pytest.raises(ValidationError):
            order_for_view(cards, "random")
