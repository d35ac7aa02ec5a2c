"""Defines a player of a duel and the guesses they made."""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.models import GuessModel, PlayerModel
from src.core.shared_types import LetterStatus
from src.duel.feedback import Feedback, is_solved, progress
from src.duel.word import Word


@dataclass(frozen=True)
class Guess:
    """
    A guess against the opponent's secret word. Immutable once appended to a player's history.
    submitted_at: seconds since the match started
    """

    word: Word
    feedback: Feedback
    submitted_by: str
    turn_index: int
    submitted_at: float = 0.0

    @property
    def is_solved(self) -> bool:
        return is_solved(self.feedback)

    @classmethod
    def from_model(cls, model: GuessModel) -> Self:
        return cls(
            word=Word(model.word),
            feedback=tuple(LetterStatus(status) for status in model.feedback),
            submitted_by=model.submitted_by,
            turn_index=model.turn_index,
            submitted_at=model.submitted_at,
        )

    def to_model(self) -> GuessModel:
        return GuessModel(
            word=str(self.word),
            feedback=[status.value for status in self.feedback],
            submitted_by=self.submitted_by,
            turn_index=self.turn_index,
            submitted_at=self.submitted_at,
        )


@dataclass
class Player:
    """
    NOTE guesses are the player's OWN guesses at the opponent's secret word.
    remaining_attempts is None when the difficulty allows unlimited attempts.
    """

    player_id: str
    username: str
    secret_word: Optional[Word] = None
    guesses: list[Guess] = field(default_factory=list)
    remaining_attempts: Optional[int] = None
    has_won: bool = False

    @property
    def is_out_of_attempts(self) -> bool:
        return self.remaining_attempts is not None and self.remaining_attempts <= 0

    def best_progress(self) -> int:
        """Highest count of correct + present letters over all guesses (0 without guesses)."""
        return max((progress(guess.feedback) for guess in self.guesses), default=0)

    def record(self, guess: Guess) -> None:
        self.guesses.append(guess)
        if self.remaining_attempts is not None:
            self.remaining_attempts -= 1

    @classmethod
    def from_model(cls, model: PlayerModel) -> Self:
        return cls(
            player_id=model.player_id,
            username=model.username,
            secret_word=Word(model.secret_word) if model.secret_word else None,
            guesses=[Guess.from_model(guess) for guess in model.guesses],
            remaining_attempts=model.remaining_attempts,
            has_won=model.has_won,
        )

    def to_model(self) -> PlayerModel:
        return PlayerModel(
            player_id=self.player_id,
            username=self.username,
            secret_word=str(self.secret_word) if self.secret_word else None,
            guesses=[guess.to_model() for guess in self.guesses],
            remaining_attempts=self.remaining_attempts,
            has_won=self.has_won,
        )
