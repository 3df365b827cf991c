"""Tests for consolidation of candidate groups."""

from tests.conftest import make_group
from ui_dedup.similarity.consolidation import consolidate


class TestConsolidate:
    """Tests for the greedy selection passes."""

    def test_empty(self) -> None:
        assert consolidate([]) == []

    def test_large_group_requires_half_new(self) -> None:
        """Test that mostly-claimed large groups are dropped."""
        big = make_group("big", ["a", "b", "c", "d"], 0.9)
        overlapping = make_group("overlap", ["c", "d", "e"], 0.95)
        fresh = make_group("fresh", ["e", "f", "g"], 0.85)
        accepted = consolidate([overlapping, fresh, big])
        assert [g.group_id for g in accepted] == ["big", "fresh"]

    def test_half_new_is_enough(self) -> None:
        first = make_group("first", ["a", "b", "c", "d"], 0.9)
        second = make_group("second", ["c", "d", "e", "f"], 0.85)
        assert [g.group_id for g in consolidate([first, second])] == ["first", "second"]

    def test_pair_with_new_members_accepted(self) -> None:
        pair = make_group("pair", ["x", "y"], 0.82)
        assert consolidate([pair]) == [pair]

    def test_covered_high_score_pair_accepted(self) -> None:
        """Test a pair inside an accepted group is kept above 0.8."""
        big = make_group("big", ["a", "b", "c"], 0.9)
        inner = make_group("inner", ["a", "b"], 0.95)
        weak_inner = make_group("weak", ["b", "c"], 0.8)
        accepted = consolidate([inner, weak_inner, big])
        assert [g.group_id for g in accepted] == ["big", "inner"]

    def test_pair_with_claimed_member_rejected(self) -> None:
        big = make_group("big", ["a", "b", "c"], 0.9)
        straddling = make_group("straddle", ["a", "z"], 0.99)
        assert [g.group_id for g in consolidate([big, straddling])] == ["big"]

    def test_later_pair_blocked_by_earlier_pair(self) -> None:
        """Test that pairs claim members for the rest of the pass."""
        first = make_group("first", ["a", "b"], 0.95)
        second = make_group("second", ["b", "c"], 0.9)
        assert [g.group_id for g in consolidate([second, first])] == ["first"]

    def test_stable_for_ties(self) -> None:
        """Test that equal size and score keep input order."""
        one = make_group("one", ["a", "b"], 0.9)
        two = make_group("two", ["c", "d"], 0.9)
        assert [g.group_id for g in consolidate([one, two])] == ["one", "two"]
        assert [g.group_id for g in consolidate([two, one])] == ["two", "one"]

    def test_overlap_bound(self) -> None:
        """Test every accepted large group added at least half new members."""
        groups = [
            make_group("g1", ["a", "b", "c", "d", "e"], 0.9),
            make_group("g2", ["d", "e", "f", "g"], 0.9),
            make_group("g3", ["a", "b", "h"], 0.9),
            make_group("g4", ["i", "j", "k"], 0.85),
        ]
        claimed: set[str] = set()
        for group in consolidate(groups):
            if group.size >= 3:
                new = [m for m in group.member_ids if m not in claimed]
                assert len(new) >= group.size * 0.5
            claimed.update(group.member_ids)
