"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Difficulty, LetterStatus, MatchStatus

PlayerId = str

ALLOWED_WORD_LENGTHS = (4, 5)
MAX_LEADERBOARD_LIMIT = 100


def _letters_only(value: str, field_name: str) -> str:
    stripped = value.strip()
    if not stripped or not stripped.isascii() or not stripped.isalpha():
        raise InvalidRequestError(f"{field_name} must only contain the letters A-Z, got {value!r}.")
    return stripped


# --- REQUEST MODELS ---
class CreateMatchRequest(BaseModel):
    player_id: PlayerId
    word_length: int = 5
    difficulty: Difficulty = Difficulty.EASY

    @field_validator("word_length")
    @classmethod
    def validate_word_length(cls, value: int) -> int:
        if value not in ALLOWED_WORD_LENGTHS:
            raise InvalidRequestError(
                f"Word length must be one of {ALLOWED_WORD_LENGTHS}, got {value}."
            )
        return value


class JoinMatchRequest(BaseModel):
    match_id: UUID
    player_id: PlayerId


class SubmitSecretRequest(BaseModel):
    match_id: UUID
    player_id: PlayerId
    secret_word: str

    @field_validator("secret_word")
    @classmethod
    def validate_secret_word(cls, value: str) -> str:
        return _letters_only(value, "secret_word")


class GuessRequest(BaseModel):
    match_id: UUID
    player_id: PlayerId
    guess: str

    @field_validator("guess")
    @classmethod
    def validate_guess(cls, value: str) -> str:
        return _letters_only(value, "guess")


class GetMatchRequest(BaseModel):
    match_id: UUID
    player_id: PlayerId


class AbandonMatchRequest(BaseModel):
    """player_id is None when the session layer cannot tell who left."""

    match_id: UUID
    player_id: Optional[PlayerId] = None


class ExpireMatchRequest(BaseModel):
    match_id: UUID


class PauseMatchRequest(BaseModel):
    match_id: UUID


class ResumeMatchRequest(BaseModel):
    match_id: UUID


class ValidateWordRequest(BaseModel):
    word: str


class LeaderboardRequest(BaseModel):
    limit: int = 10
    current_user_id: Optional[str] = None

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, value: int) -> int:
        if not 1 <= value <= MAX_LEADERBOARD_LIMIT:
            raise InvalidRequestError(
                f"limit must be between 1 and {MAX_LEADERBOARD_LIMIT}, got {value}."
            )
        return value


# --- RESPONSE MODELS ---
class GuessView(BaseModel):
    word: str
    feedback: list[LetterStatus]
    turn_index: int
    submitted_at: float


class PlayerView(BaseModel):
    player_id: PlayerId
    username: str
    secret_word: Optional[str]  # hidden (None) for the opponent until the match is over
    has_submitted_secret: bool
    guesses: list[GuessView]
    remaining_attempts: Optional[int]  # None = unlimited
    has_won: bool


class MatchResponse(BaseModel):
    match_id: UUID
    status: MatchStatus
    word_length: int
    difficulty: Difficulty
    active_player_id: Optional[PlayerId]
    winner_id: Optional[PlayerId]
    abandoned_by: Optional[PlayerId]
    turn_time_remaining: float
    players: list[PlayerView]
    points: Optional[dict[PlayerId, int]] = None  # only once the match is over


class GuessResponse(BaseModel):
    guess: GuessView
    match: MatchResponse


class ValidatedWord(BaseModel):
    valid: bool
    word: str


class ValidateWordResponse(BaseModel):
    success: bool
    data: Optional[ValidatedWord] = None
    error: Optional[str] = None
    code: Optional[str] = None
    retryable: bool = False


class LeaderboardEntryView(BaseModel):
    rank: int
    user_id: str
    username: str
    points: int
    coins: int = 0
    games_played: int = 0
    games_won: int = 0


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntryView]
    current_player_data: Optional[LeaderboardEntryView] = None
