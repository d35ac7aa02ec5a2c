"""
Leaderboard points for a finished match.

Pure functions of a MatchSummary: the same summary always gives the same deltas, so a retried persistence
write can safely re-apply them. Time remaining is captured in the summary and never read from a clock here.

Points
----
win   : floor((50 + guess bonus + speed bonus + letter bonus) * difficulty multiplier * 2.5)
          guess bonus  = 15 per guess under 6 (never negative)
          speed bonus  = 1 per 5 seconds of match time left, at most 60
          letter bonus = 5 per distinct letter ever marked correct or present
loss  : 100 (participation)
tie   : both players get the loss points
abandoned : 0 for both, minus `abandon_penalty` for the player who left

Coins: 1 per 10 points earned in a match. A penalty never takes coins away.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence
from uuid import UUID

from src.core.exceptions import EngineError
from src.core.models import LeaderboardRecord
from src.core.shared_types import Difficulty, LetterStatus, MatchStatus
from src.duel.difficulty import DifficultySettings
from src.duel.player import Guess

WIN_BASE_POINTS = 50
LOSS_POINTS = 100
TIE_POINTS = LOSS_POINTS
GUESS_BONUS_PER_GUESS = 15
GUESS_BONUS_THRESHOLD = 6
SPEED_BONUS_SECONDS_PER_POINT = 5
SPEED_BONUS_CAP = 60
LETTER_BONUS_PER_LETTER = 5
MULTIPLAYER_MULTIPLIER = Decimal("2.5")
POINTS_PER_COIN = 10


@dataclass(frozen=True)
class PlayerResult:
    player_id: str
    username: str
    guesses: tuple[Guess, ...]


@dataclass(frozen=True)
class MatchSummary:
    """Snapshot of a finished match: the scorer's only input."""

    match_id: UUID
    status: MatchStatus
    winner_id: Optional[str]
    abandoned_by: Optional[str]
    difficulty: Difficulty
    seconds_remaining: float
    players: tuple[PlayerResult, ...]

    def player(self, player_id: str) -> PlayerResult:
        return next(result for result in self.players if result.player_id == player_id)


@dataclass(frozen=True)
class ScoreBreakdown:
    base_points: int
    guess_bonus: int
    speed_bonus: int
    letter_bonus: int
    difficulty_multiplier: Decimal
    multiplayer_multiplier: Decimal
    correct_letters_count: int
    total_score: int


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    username: str
    points: int
    rank: int
    coins: int = 0
    games_played: int = 0
    games_won: int = 0


def coins_for(points: int) -> int:
    return max(0, points) // POINTS_PER_COIN


def count_correct_letters(guesses: Sequence[Guess]) -> int:
    """Distinct letters that were ever marked correct or present."""
    letters = {
        letter
        for guess in guesses
        for letter, status in zip(guess.word, guess.feedback)
        if status != LetterStatus.ABSENT
    }
    return len(letters)


def win_breakdown(
    guesses: Sequence[Guess], seconds_remaining: float, difficulty: Difficulty
) -> ScoreBreakdown:
    guess_bonus = max(0, (GUESS_BONUS_THRESHOLD - len(guesses)) * GUESS_BONUS_PER_GUESS)
    speed_bonus = min(
        SPEED_BONUS_CAP, int(max(0.0, seconds_remaining) // SPEED_BONUS_SECONDS_PER_POINT)
    )
    correct_letters = count_correct_letters(guesses)
    letter_bonus = correct_letters * LETTER_BONUS_PER_LETTER
    # Decimal keeps e.g. 1.2 * 2.5 exactly 3 before flooring
    difficulty_multiplier = Decimal(
        str(DifficultySettings.for_level(difficulty).points_multiplier)
    )
    subtotal = WIN_BASE_POINTS + guess_bonus + speed_bonus + letter_bonus
    total = math.floor(subtotal * difficulty_multiplier * MULTIPLAYER_MULTIPLIER)
    return ScoreBreakdown(
        base_points=WIN_BASE_POINTS,
        guess_bonus=guess_bonus,
        speed_bonus=speed_bonus,
        letter_bonus=letter_bonus,
        difficulty_multiplier=difficulty_multiplier,
        multiplayer_multiplier=MULTIPLAYER_MULTIPLIER,
        correct_letters_count=correct_letters,
        total_score=total,
    )


def flat_breakdown(points: int, guesses: Sequence[Guess]) -> ScoreBreakdown:
    """Loss / tie / abandon: a flat amount, no bonuses and no multipliers."""
    return ScoreBreakdown(
        base_points=points,
        guess_bonus=0,
        speed_bonus=0,
        letter_bonus=0,
        difficulty_multiplier=Decimal(1),
        multiplayer_multiplier=Decimal(1),
        correct_letters_count=count_correct_letters(guesses),
        total_score=points,
    )


class LeaderboardScorer:
    """Maps a finished match to point deltas per player."""

    def __init__(self, abandon_penalty: int = 0) -> None:
        if abandon_penalty < 0:
            raise ValueError("abandon_penalty is a number of points to subtract, must be >= 0.")
        self.abandon_penalty = abandon_penalty

    def score(self, summary: MatchSummary) -> dict[str, int]:
        return {
            player_id: breakdown.total_score
            for player_id, breakdown in self.breakdowns(summary).items()
        }

    def breakdowns(self, summary: MatchSummary) -> dict[str, ScoreBreakdown]:
        if summary.status == MatchStatus.WON:
            return {
                result.player_id: (
                    win_breakdown(result.guesses, summary.seconds_remaining, summary.difficulty)
                    if result.player_id == summary.winner_id
                    else flat_breakdown(LOSS_POINTS, result.guesses)
                )
                for result in summary.players
            }
        if summary.status == MatchStatus.TIED:
            return {
                result.player_id: flat_breakdown(TIE_POINTS, result.guesses)
                for result in summary.players
            }
        if summary.status == MatchStatus.ABANDONED:
            return {
                result.player_id: flat_breakdown(
                    -self.abandon_penalty if result.player_id == summary.abandoned_by else 0,
                    result.guesses,
                )
                for result in summary.players
            }
        raise EngineError(f"Cannot score a match that has not ended. status: {summary.status}")


def rank_entries(records: Iterable[LeaderboardRecord]) -> list[LeaderboardEntry]:
    """
    Total ordering: most points first, then whoever reached their total earliest, then user id.
    Ranks are 1-based and unique.
    """
    ordered = sorted(records, key=lambda record: (-record.points, record.achieved_at, record.user_id))
    return [
        LeaderboardEntry(
            user_id=record.user_id,
            username=record.username,
            points=record.points,
            rank=rank,
            coins=record.coins,
            games_played=record.games_played,
            games_won=record.games_won,
        )
        for rank, record in enumerate(ordered, start=1)
    ]
