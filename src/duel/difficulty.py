"""Rules that change with the chosen difficulty."""

from dataclasses import dataclass, replace
from typing import Optional, Self

from src.core.shared_types import Difficulty

DEFAULT_TURN_DURATION = 30.0


@dataclass(frozen=True)
class DifficultySettings:
    """
    attempt_limit: guesses per player (None = unlimited)
    turn_duration: seconds a player has to submit one guess
    match_time_limit: overall time budget of a match in seconds
    points_multiplier: applied to the points of a win
    """

    level: Difficulty
    attempt_limit: Optional[int]
    turn_duration: float
    match_time_limit: float
    points_multiplier: float

    @classmethod
    def for_level(cls, level: Difficulty | str) -> Self:
        return DIFFICULTY_RULES[Difficulty(level)]

    def with_turn_duration(self, seconds: float) -> Self:
        return replace(self, turn_duration=seconds)


DIFFICULTY_RULES: dict[Difficulty, DifficultySettings] = {
    Difficulty.EASY: DifficultySettings(
        level=Difficulty.EASY,
        attempt_limit=None,
        turn_duration=DEFAULT_TURN_DURATION,
        match_time_limit=10 * 60,
        points_multiplier=1.0,
    ),
    Difficulty.MEDIUM: DifficultySettings(
        level=Difficulty.MEDIUM,
        attempt_limit=15,
        turn_duration=DEFAULT_TURN_DURATION,
        match_time_limit=7 * 60,
        points_multiplier=1.2,
    ),
    Difficulty.DIFFICULT: DifficultySettings(
        level=Difficulty.DIFFICULT,
        attempt_limit=10,
        turn_duration=DEFAULT_TURN_DURATION,
        match_time_limit=5 * 60,
        points_multiplier=1.5,
    ),
}
