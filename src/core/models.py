"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# Type aliases to make MatchModel easier to read
PlayerId = str
LetterStatusName = str


@dataclass
class GuessModel:
    word: str
    feedback: list[LetterStatusName]
    submitted_by: PlayerId
    turn_index: int
    submitted_at: float


@dataclass
class PlayerModel:
    player_id: PlayerId
    username: str
    secret_word: Optional[str]
    guesses: list[GuessModel] = field(default_factory=list)
    remaining_attempts: Optional[int] = None
    has_won: bool = False


@dataclass
class MatchModel:
    """Transport-safe representation of a duel used between API, Service, DB, and Match layers."""

    word_length: int
    difficulty: str
    status: str
    players: list[PlayerModel]
    creator_id: PlayerId
    active_player_id: Optional[PlayerId] = None
    winner_id: Optional[PlayerId] = None
    abandoned_by: Optional[PlayerId] = None
    turn_index: int = 0
    elapsed_seconds: float = 0.0


@dataclass
class LeaderboardRecord:
    """Persisted totals of one user (points, coins, games). Rank is derived, never stored."""

    user_id: str
    username: str
    points: int
    achieved_at: datetime
    coins: int = 0
    games_played: int = 0
    games_won: int = 0
