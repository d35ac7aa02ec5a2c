"""Unit tests for src/duel/scoring.py"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import pytest

from src.core.exceptions import EngineError
from src.core.models import LeaderboardRecord
from src.core.shared_types import Difficulty, MatchStatus
from src.duel.feedback import score
from src.duel.player import Guess
from src.duel.scoring import (
    LeaderboardScorer,
    MatchSummary,
    PlayerResult,
    coins_for,
    count_correct_letters,
    rank_entries,
    win_breakdown,
)
from src.duel.word import Word

SECRET = Word("CRANE")


def make_guesses(player_id: str, *words: str) -> tuple[Guess, ...]:
    return tuple(
        Guess(
            word=Word(word),
            feedback=score(SECRET, Word(word)),
            submitted_by=player_id,
            turn_index=2 * i + 1,
        )
        for i, word in enumerate(words)
    )


def make_summary(
    status: MatchStatus,
    winner_id: Optional[str] = None,
    abandoned_by: Optional[str] = None,
    difficulty: Difficulty = Difficulty.EASY,
    seconds_remaining: float = 300,
    alice_words: tuple[str, ...] = ("AUDIO", "CRANE"),
    bob_words: tuple[str, ...] = ("STARE",),
) -> MatchSummary:
    return MatchSummary(
        match_id=uuid4(),
        status=status,
        winner_id=winner_id,
        abandoned_by=abandoned_by,
        difficulty=difficulty,
        seconds_remaining=seconds_remaining,
        players=(
            PlayerResult("alice", "Alice", make_guesses("alice", *alice_words)),
            PlayerResult("bob", "Bob", make_guesses("bob", *bob_words)),
        ),
    )


# -- WIN POINTS --
def test_count_correct_letters() -> None:
    """AUDIO only reveals the A, CRANE all 5 letters: A is counted once."""
    assert count_correct_letters(make_guesses("alice", "AUDIO", "CRANE")) == 5
    assert count_correct_letters(make_guesses("alice", "AUDIO")) == 1
    assert count_correct_letters(()) == 0


def test_win_breakdown() -> None:
    breakdown = win_breakdown(make_guesses("alice", "AUDIO", "CRANE"), 300, Difficulty.EASY)
    assert breakdown.base_points == 50
    assert breakdown.guess_bonus == 60
    assert breakdown.speed_bonus == 60
    assert breakdown.letter_bonus == 25
    assert breakdown.correct_letters_count == 5
    assert breakdown.difficulty_multiplier == Decimal("1.0")
    assert breakdown.multiplayer_multiplier == Decimal("2.5")
    # (50 + 60 + 60 + 25) * 1.0 * 2.5 = 487.5
    assert breakdown.total_score == 487


@pytest.mark.parametrize(
    "words,seconds_remaining,difficulty,expected",
    [
        (("AUDIO", "CRANE"), 300, Difficulty.EASY, 487),
        # 3 guesses, 240s left: (50 + 45 + 48 + 25) * 2.5
        (("AUDIO", "MOUSE", "CRANE"), 240, Difficulty.EASY, 420),
        # (50 + 60 + 60 + 25) * 1.2 * 2.5
        (("AUDIO", "CRANE"), 300, Difficulty.MEDIUM, 585),
        # 731.25
        (("AUDIO", "CRANE"), 300, Difficulty.DIFFICULT, 731),
        # no time left: (50 + 60 + 0 + 25) * 2.5 = 337.5
        (("AUDIO", "CRANE"), 0, Difficulty.EASY, 337),
        # speed bonus capped at 60
        (("AUDIO", "CRANE"), 3600, Difficulty.EASY, 487),
        # first-guess solve: (50 + 75 + 60 + 25) * 2.5
        (("CRANE",), 420, Difficulty.EASY, 525),
        # no guess bonus from the 6th guess on: (50 + 0 + 20 + 25) * 2.5 = 237.5
        (("AUDIO", "MOUSE", "STARE", "RAISE", "MOUSE", "AUDIO", "CRANE"), 100, Difficulty.EASY, 237),
    ],
)
def test_win_points(
    words: tuple[str, ...], seconds_remaining: float, difficulty: Difficulty, expected: int
) -> None:
    summary = make_summary(
        MatchStatus.WON,
        winner_id="alice",
        difficulty=difficulty,
        seconds_remaining=seconds_remaining,
        alice_words=words,
    )
    assert LeaderboardScorer().score(summary)["alice"] == expected


# -- OTHER OUTCOMES --
def test_loser_gets_participation_points() -> None:
    deltas = LeaderboardScorer().score(make_summary(MatchStatus.WON, winner_id="alice"))
    assert deltas == {"alice": 487, "bob": 100}


def test_tie_gives_both_the_loss_points() -> None:
    deltas = LeaderboardScorer().score(make_summary(MatchStatus.TIED))
    assert deltas == {"alice": 100, "bob": 100}


def test_abandoned_gives_nothing() -> None:
    deltas = LeaderboardScorer().score(make_summary(MatchStatus.ABANDONED, abandoned_by="bob"))
    assert deltas == {"alice": 0, "bob": 0}


def test_abandon_penalty_hits_the_player_who_left() -> None:
    scorer = LeaderboardScorer(abandon_penalty=25)
    assert scorer.score(make_summary(MatchStatus.ABANDONED, abandoned_by="bob")) == {"alice": 0, "bob": -25}
    # nobody to blame (e.g. the session layer closed the match)
    assert scorer.score(make_summary(MatchStatus.ABANDONED)) == {"alice": 0, "bob": 0}


def test_negative_abandon_penalty() -> None:
    with pytest.raises(ValueError):
        LeaderboardScorer(abandon_penalty=-1)


@pytest.mark.parametrize("status", [MatchStatus.CREATED, MatchStatus.IN_PROGRESS])
def test_cannot_score_unfinished_match(status: MatchStatus) -> None:
    with pytest.raises(EngineError):
        LeaderboardScorer().score(make_summary(status))


def test_scoring_is_deterministic() -> None:
    """Re-scoring the same summary (e.g. a retried write) gives the same deltas."""
    scorer = LeaderboardScorer()
    summary = make_summary(MatchStatus.WON, winner_id="bob", bob_words=("STARE", "CRANE"))
    assert scorer.score(summary) == scorer.score(summary)
    assert scorer.breakdowns(summary) == scorer.breakdowns(summary)


# -- RANKING --
def test_rank_entries() -> None:
    """Most points first; equal points: whoever got there first; then by user id."""
    t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
    records = [
        LeaderboardRecord("carol", "Carol", 300, t0 + timedelta(minutes=5)),
        LeaderboardRecord("alice", "Alice", 500, t0 + timedelta(minutes=9)),
        LeaderboardRecord("dave", "Dave", 300, t0 + timedelta(minutes=1)),
        LeaderboardRecord("bob", "Bob", 300, t0 + timedelta(minutes=5)),
    ]
    ranked = rank_entries(records)
    assert [(entry.rank, entry.user_id, entry.points) for entry in ranked] == [
        (1, "alice", 500),
        (2, "dave", 300),
        (3, "bob", 300),
        (4, "carol", 300),
    ]


def test_rank_entries_empty() -> None:
    assert rank_entries([]) == []


@pytest.mark.parametrize("points, coins", [(512, 51), (100, 10), (9, 0), (0, 0), (-25, 0)])
def test_coins_for(points: int, coins: int) -> None:
    assert coins_for(points) == coins


def test_rank_entries_keeps_statistics() -> None:
    record = LeaderboardRecord("alice", "Alice", 487, datetime(2025, 1, 1, tzinfo=timezone.utc), 48, 3, 1)
    (entry,) = rank_entries([record])
    assert (entry.rank, entry.coins, entry.games_played, entry.games_won) == (1, 48, 3, 1)
