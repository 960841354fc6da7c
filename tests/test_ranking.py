"""
Tests for the ranking constraint manager.

Injectivity: no two options ever hold the same non-empty rank label.
"""

import pytest

from fieldforms.errors import RankingError
from fieldforms.model import DEFAULT_RANKING_OPTIONS, FieldDefinition, FieldType
from fieldforms.ranking import RankingManager


def assert_injective(manager):
    held = [r for r in manager.rankings.values() if r]
    assert len(held) == len(set(held))


@pytest.fixture
def manager():
    return RankingManager(["A", "B", "C"], ["1er", "2e", "3e"])


class TestToggle:
    """Test checking and unchecking options."""

    def test_check_in_order(self, manager):
        """Should assign ranks in order of checking."""
        for option in ("A", "B", "C"):
            manager.toggle(option, True)
        assert manager.as_dict() == {"A": "1er", "B": "2e", "C": "3e"}

    def test_uncheck_frees_rank(self, manager):
        """Should free a rank when unchecked."""
        for option in ("A", "B", "C"):
            manager.toggle(option, True)
        manager.toggle("B", False)
        assert manager.as_dict() == {"A": "1er", "B": "", "C": "3e"}
        assert manager.used_ranks() == ["1er", "3e"]

    def test_freed_rank_is_reused(self, manager):
        """Should reuse the first freed rank."""
        for option in ("A", "B", "C"):
            manager.toggle(option, True)
        manager.toggle("B", False)
        manager.toggle("D", True)
        assert manager.rank_of("D") == "2e"

    def test_no_free_rank_leaves_option_unranked(self, manager):
        """Should leave an option unranked when all ranks are held."""
        for option in ("A", "B", "C", "D"):
            manager.toggle(option, True)
        assert manager.rank_of("D") == ""
        assert "D" in manager.rankings
        assert_injective(manager)

    def test_rechecking_keeps_rank(self, manager):
        """Should keep the rank of a re-checked option."""
        manager.toggle("A", True)
        manager.toggle("B", True)
        manager.toggle("B", True)
        assert manager.as_dict() == {"A": "1er", "B": "2e"}


class TestSetRank:
    """Test explicit rank assignment."""

    def test_swap_out_previous_holder(self, manager):
        """Should unrank the previous holder of a rank."""
        manager.rankings.update({"A": "1er", "B": "", "C": "3e"})
        manager.set_rank("B", "1er")
        assert manager.as_dict() == {"A": "", "B": "1er", "C": "3e"}

    def test_move_own_rank(self, manager):
        """Should move an option to another free rank."""
        manager.toggle("A", True)
        manager.set_rank("A", "3e")
        assert manager.as_dict() == {"A": "3e"}
        assert manager.available_ranks("B") == ["1er", "2e"]

    def test_empty_rank_unchecks(self, manager):
        """Should uncheck on an empty rank."""
        manager.toggle("A", True)
        manager.set_rank("A", "")
        assert manager.rank_of("A") == ""
        assert not manager.is_checked("A")

    def test_unknown_rank_rejected(self, manager):
        """Should reject rank labels outside the vocabulary."""
        manager.toggle("A", True)
        with pytest.raises(RankingError):
            manager.set_rank("B", "10e")
        assert manager.as_dict() == {"A": "1er"}

    def test_invariant_holds_over_sequence(self, manager):
        """Should never give two options the same rank."""
        steps = [("A", "1er"), ("B", "1er"), ("C", "2e"), ("A", "2e"), ("B", "3e"), ("C", "3e")]
        for option, rank in steps:
            manager.set_rank(option, rank)
            assert_injective(manager)

    def test_available_ranks_include_own(self, manager):
        """Should offer free ranks plus the option's own."""
        manager.toggle("A", True)
        manager.toggle("B", True)
        assert manager.available_ranks("A") == ["1er", "3e"]
        assert manager.available_ranks("C") == ["3e"]


class TestConstruction:
    """Test managers built from fields and preloaded mappings."""

    def test_default_ranking_vocabulary(self):
        """Should use the default rank labels."""
        fdef = FieldDefinition(id="s.r", type=FieldType.RANKING, options=["A", "B"])
        manager = RankingManager.for_field(fdef)
        assert manager.ranking_options == list(DEFAULT_RANKING_OPTIONS)

    def test_explicit_empty_vocabulary_is_kept(self):
        """Should keep an explicitly empty rank list instead of the default."""
        fdef = FieldDefinition(id="s.r", type=FieldType.RANKING, options=["A"], ranking_options=[])
        manager = RankingManager.for_field(fdef)
        assert manager.ranking_options == []
        manager.toggle("A", True)
        assert manager.as_dict() == {"A": ""}

    def test_preloaded_duplicates_are_cleared(self):
        """Should clear duplicate preloaded ranks."""
        manager = RankingManager(["A", "B"], ["1er", "2e"], {"A": "1er", "B": "1er"})
        assert manager.as_dict() == {"A": "1er", "B": ""}

    def test_preloaded_unknown_rank_cleared(self):
        """Should clear unknown preloaded ranks."""
        manager = RankingManager(["A"], ["1er"], {"A": "7e"})
        assert manager.as_dict() == {"A": ""}

    def test_mapping_mutated_in_place(self):
        """Should update the mapping it was given."""
        rankings = {}
        manager = RankingManager(["A"], ["1er"], rankings)
        manager.toggle("A", True)
        assert rankings == {"A": "1er"}
