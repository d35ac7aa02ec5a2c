"""Outcome when both players ran out of attempts (or time) without solving the opponent's word."""

from typing import Optional, Sequence

from src.core.shared_types import TieBreakPolicy
from src.duel.player import Player


def resolve_without_solve(
    players: Sequence[Player], policy: TieBreakPolicy
) -> Optional[str]:
    """
    Return the winner's id, or None for a tie.
    ----

    PURE_TIE: always a tie.
    PROGRESS: the player whose best guess had more correct + present letters wins. Equal progress is still a tie.
    """
    if policy == TieBreakPolicy.PURE_TIE:
        return None

    first, second = players
    first_progress, second_progress = first.best_progress(), second.best_progress()
    if first_progress == second_progress:
        return None
    return first.player_id if first_progress > second_progress else second.player_id
