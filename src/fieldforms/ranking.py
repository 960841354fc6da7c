"""
Ranking Constraint Manager.

A ranking field lets the respondent select options and give each
selected option a rank label from a fixed vocabulary:

    options         = ["Bois", "Charbon", "Gaz"]
    ranking_options = ["1er", "2e", "3e"]
    rankings        = {"Bois": "1er", "Charbon": "", "Gaz": "2e"}

"" is the sentinel for "selected but unranked".

INVARIANT:
    No two options hold the same non-empty rank label. The manager
    enforces it by swap-out on every assignment, so callers can never
    observe a duplicate.
"""

import logging
from typing import Dict, Iterable, List, Optional

from fieldforms.errors import RankingError
from fieldforms.model import DEFAULT_RANKING_OPTIONS, FieldDefinition

logger = logging.getLogger(__name__)


UNRANKED = ""


class RankingManager:
    """
    Maintains the option -> rank mapping for one ranking field.

    The mapping is mutated in place, so a manager built over an
    AnswerState entry keeps that entry current.
    """

    def __init__(
        self,
        options: Iterable[str] = (),
        ranking_options: Optional[Iterable[str]] = None,
        rankings: Optional[Dict[str, str]] = None,
    ):
        self.options: List[str] = list(options)
        self.ranking_options: List[str] = list(DEFAULT_RANKING_OPTIONS if ranking_options is None else ranking_options)
        self.rankings: Dict[str, str] = rankings if rankings is not None else {}
        self._repair()

    @classmethod
    def for_field(cls, field: FieldDefinition, rankings: Optional[Dict[str, str]] = None) -> "RankingManager":
        return cls(field.options, field.effective_ranking_options, rankings)

    def _repair(self) -> None:
        """Clear duplicate or unknown rank labels found in a preloaded mapping."""
        held = set()
        for option, rank in list(self.rankings.items()):
            if rank == UNRANKED:
                continue
            if rank not in self.ranking_options or rank in held:
                logger.warning("Clearing invalid rank %r on option %r", rank, option)
                self.rankings[option] = UNRANKED
                continue
            held.add(rank)

    def used_ranks(self) -> List[str]:
        """Rank labels currently held, in vocabulary order."""
        held = set(self.rankings.values())
        return [r for r in self.ranking_options if r in held]

    def holder_of(self, rank: str) -> Optional[str]:
        for option, held in self.rankings.items():
            if held == rank:
                return option
        return None

    def available_ranks(self, option: str) -> List[str]:
        """Labels `option` may pick: free ones plus the one it already holds."""
        current = self.rankings.get(option, UNRANKED)
        used = set(self.used_ranks())
        return [r for r in self.ranking_options if r not in used or r == current]

    def is_checked(self, option: str) -> bool:
        return option in self.rankings and self.rankings[option] != UNRANKED

    def rank_of(self, option: str) -> str:
        return self.rankings.get(option, UNRANKED)

    def toggle(self, option: str, checked: bool) -> None:
        """
        Select or deselect `option`.

        Selecting assigns the first free rank label; when every label is
        taken the option stays unranked. Deselecting frees its label.
        """
        if not checked:
            self.rankings[option] = UNRANKED
            return

        if self.is_checked(option):
            return
        used = set(self.used_ranks())
        free = [r for r in self.ranking_options if r not in used]
        self.rankings[option] = free[0] if free else UNRANKED

    def set_rank(self, option: str, rank: str) -> None:
        """
        Assign `rank` to `option`, clearing any other option holding it.

        Raises:
            RankingError: If `rank` is not in the ranking vocabulary
        """
        if rank == UNRANKED:
            self.toggle(option, False)
            return
        if rank not in self.ranking_options:
            raise RankingError(f"Unknown rank {rank!r}; expected one of {self.ranking_options}")

        holder = self.holder_of(rank)
        if holder is not None and holder != option:
            self.rankings[holder] = UNRANKED
        self.rankings[option] = rank

    def as_dict(self) -> Dict[str, str]:
        return dict(self.rankings)
