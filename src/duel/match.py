"""
The Match class is the entrypoint into the domain layer for the service layer.
It owns the state of one duel (both players, turn order, guess history, turn clock)
and is the ONLY place where that state gets mutated.

Events that mutate a match:
    - secret word submission (setup)
    - guess submission
    - turn clock expiry (arrives on the scheduler's thread)
    - abandonment / overall time budget / turn pause and resume (signaled by the session layer)

All of them are applied while holding the match's lock, so they form one ordered queue per match.
The first event to acquire the lock wins a race: a guess checked in during turn N is only applied if the
match is still in turn N once its dictionary lookup returned.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Self
from uuid import UUID, uuid4

from src.core.exceptions import (
    BadLengthError,
    InvalidGuessError,
    InvalidWordFormatError,
    MatchNotInProgressError,
    MatchSetupError,
    NotActivePlayerError,
    NotInDictionaryError,
)
from src.core.models import MatchModel
from src.core.shared_types import TERMINAL_STATUSES, MatchStatus, TieBreakPolicy
from src.duel.clock import TurnClock
from src.duel.difficulty import DifficultySettings
from src.duel.feedback import score
from src.duel.player import Guess, Player
from src.duel.scoring import MatchSummary, PlayerResult
from src.duel.tiebreak import resolve_without_solve
from src.duel.validator import WordValidator
from src.duel.word import WORD_LENGTHS, Word

logger = logging.getLogger(__name__)

MatchListener = Callable[["Match"], None]


@dataclass(eq=False)
class Match:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    match_id: UUID
    creator_id: str
    word_length: int
    difficulty: DifficultySettings
    validator: WordValidator = field(repr=False)
    clock: TurnClock = field(repr=False)
    players: list[Player] = field(default_factory=list)
    status: MatchStatus = MatchStatus.CREATED
    active_player_id: Optional[str] = None
    winner_id: Optional[str] = None
    abandoned_by: Optional[str] = None
    turn_index: int = 0
    tie_break: TieBreakPolicy = TieBreakPolicy.PURE_TIE
    listener: Optional[MatchListener] = field(default=None, repr=False)
    elapsed_offset: float = 0.0  # time already played before this instance took over (restored matches)
    _started_at: Optional[float] = field(default=None, init=False, repr=False)
    _ended_elapsed: Optional[float] = field(default=None, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    @classmethod
    def create(
        cls,
        creator_id: str,
        word_length: int,
        difficulty: DifficultySettings,
        validator: WordValidator,
        clock: TurnClock,
        username: Optional[str] = None,
        tie_break: TieBreakPolicy = TieBreakPolicy.PURE_TIE,
        listener: Optional[MatchListener] = None,
    ) -> Self:
        """Open a new match. The creator is registered right away and will play the first turn."""
        if word_length not in WORD_LENGTHS:
            raise MatchSetupError(
                f"Cannot create match with {word_length=}. Pick one from {WORD_LENGTHS}."
            )
        creator = Player(
            player_id=creator_id,
            username=username or creator_id,
            remaining_attempts=difficulty.attempt_limit,
        )
        match = cls(
            match_id=uuid4(),
            creator_id=creator_id,
            word_length=word_length,
            difficulty=difficulty,
            validator=validator,
            clock=clock,
            players=[creator],
            tie_break=tie_break,
            listener=listener,
        )
        logger.info("Match %s created by %s (%s letters, %s)", match.match_id, creator_id, word_length, difficulty.level)
        return match

    @classmethod
    def from_model(
        cls,
        match_id: UUID,
        model: MatchModel,
        validator: WordValidator,
        clock: TurnClock,
        turn_duration: Optional[float] = None,
        tie_break: TieBreakPolicy = TieBreakPolicy.PURE_TIE,
        listener: Optional[MatchListener] = None,
    ) -> Self:
        """
        Rebuild a Match from a stored MatchModel.
        NOTE the turn clock is NOT running afterwards. Call restart_turn() to continue an in-progress match.
        """
        difficulty = DifficultySettings.for_level(model.difficulty)
        if turn_duration is not None:
            difficulty = difficulty.with_turn_duration(turn_duration)

        match = cls(
            match_id=match_id,
            creator_id=model.creator_id,
            word_length=model.word_length,
            difficulty=difficulty,
            validator=validator,
            clock=clock,
            players=[Player.from_model(player) for player in model.players],
            status=MatchStatus(model.status),
            active_player_id=model.active_player_id,
            winner_id=model.winner_id,
            abandoned_by=model.abandoned_by,
            turn_index=model.turn_index,
            tie_break=tie_break,
            listener=listener,
            elapsed_offset=model.elapsed_seconds,
        )
        if match.is_over:
            match._ended_elapsed = model.elapsed_seconds
        elif match.status == MatchStatus.IN_PROGRESS:
            match._started_at = clock.scheduler.now()
        return match

    def to_model(self) -> MatchModel:
        """Encode back into a format the Service layer uses"""
        with self._lock:
            return MatchModel(
                word_length=self.word_length,
                difficulty=self.difficulty.level.value,
                status=self.status.value,
                players=[player.to_model() for player in self.players],
                creator_id=self.creator_id,
                active_player_id=self.active_player_id,
                winner_id=self.winner_id,
                abandoned_by=self.abandoned_by,
                turn_index=self.turn_index,
                elapsed_seconds=self.elapsed_seconds(),
            )

    @property
    def is_over(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def join(self, player_id: str, username: Optional[str] = None) -> None:
        """Registering the 2nd player to an open match"""
        with self._lock:
            if self.status != MatchStatus.CREATED or len(self.players) != 1:
                raise MatchSetupError(
                    f"Cannot join this match. Match is not accepting new players. status: {self.status}"
                )
            if player_id == self.creator_id:
                raise MatchSetupError("Cannot play a match against yourself.")
            self.players.append(
                Player(
                    player_id=player_id,
                    username=username or player_id,
                    remaining_attempts=self.difficulty.attempt_limit,
                )
            )
            logger.info("Player %s joined match %s", player_id, self.match_id)
        self._notify()

    def submit_secret(self, player_id: str, word: str) -> Word:
        """
        Register the word your opponent has to guess.
        ----

        Validation errors (bad length, not in dictionary, dictionary unreachable) propagate unchanged
        so the player can simply try again. Once both secrets are in, the match starts.
        """
        with self._lock:
            self._assert_setup_open(player_id)

        candidate = Word.parse(word)
        if len(candidate) != self.word_length:
            raise BadLengthError(
                f"Secret word must have {self.word_length} letters, got {len(candidate)}."
            )
        secret = self.validator.validate(candidate).normalized_word

        with self._lock:
            # re-check: the match may have been abandoned while the dictionary was consulted
            self._assert_setup_open(player_id)
            self._get_player(player_id).secret_word = secret
            logger.info("Player %s submitted a secret word in match %s", player_id, self.match_id)
            if self._is_ready_to_start():
                self._begin()
        self._notify()
        return secret

    def submit_guess(self, player_id: str, word: str) -> Guess:
        """
        Attempt a guess at the opponent's secret word.
        -----

        1. make sure the match is in progress and it is your turn
        2. validate the word (outside the lock, the dictionary may be remote)
        3. make sure it is STILL your turn (the clock may have expired meanwhile)
        4. score it, record it, and decide: won / resolved without solve / next turn
        """
        with self._lock:
            self._assert_in_progress()
            self._assert_your_turn(player_id)
            turn_token = self.turn_index

        normalized = self._validate_guess(player_id, word)

        with self._lock:
            self._assert_in_progress()
            self._assert_your_turn(player_id)
            if turn_token != self.turn_index:
                raise NotActivePlayerError(
                    "Your turn ran out before the guess could be processed."
                )
            guess = self._apply_guess(self._get_player(player_id), normalized)
        self._notify()
        return guess

    def abandon(self, player_id: Optional[str] = None) -> bool:
        """
        Session layer signals a disconnect / quit. Terminal, no winner.
        Returns False (and changes nothing) if the match had already ended.
        """
        with self._lock:
            if self.is_over:
                return False
            if player_id is not None:
                self._get_player(player_id)
            self.abandoned_by = player_id
            self._finish(MatchStatus.ABANDONED)
        self._notify()
        return True

    def end_on_time_budget(self) -> bool:
        """Session layer signals the overall match time cap was reached."""
        with self._lock:
            if self.status != MatchStatus.IN_PROGRESS:
                return False
            logger.info("Match %s ran out of its time budget", self.match_id)
            self._resolve_without_solve()
        self._notify()
        return True

    def restart_turn(self) -> None:
        """Give the active player a fresh, full turn (used after restoring a match from storage)."""
        with self._lock:
            self._assert_in_progress()
            self._start_turn()

    def pause_turn(self) -> None:
        """
        Stop the turn countdown (e.g. the active player's connection dropped).
        Match time keeps running while paused: the budget is checked again on resume.
        """
        with self._lock:
            self._assert_in_progress()
            self.clock.pause()

    def resume_turn(self) -> bool:
        """Continue the paused turn. Returns False if the match time budget ran out meanwhile (match resolved)."""
        with self._lock:
            self._assert_in_progress()
            if self._is_time_budget_spent():
                logger.info("Match %s ran out of its time budget while paused", self.match_id)
                self._resolve_without_solve()
                resumed = False
            else:
                self.clock.resume()
                resumed = True
        if not resumed:
            self._notify()
        return resumed

    def turn_time_remaining(self) -> float:
        if self.status != MatchStatus.IN_PROGRESS:
            return 0.0
        return self.clock.remaining()

    def elapsed_seconds(self) -> float:
        if self._ended_elapsed is not None:
            return self._ended_elapsed
        if self._started_at is None:
            return self.elapsed_offset
        return self.elapsed_offset + self.clock.scheduler.now() - self._started_at

    def summary(self) -> MatchSummary:
        """Everything the LeaderboardScorer needs, frozen at the time of the call."""
        with self._lock:
            seconds_remaining = max(
                0.0, self.difficulty.match_time_limit - self.elapsed_seconds()
            )
            return MatchSummary(
                match_id=self.match_id,
                status=self.status,
                winner_id=self.winner_id,
                abandoned_by=self.abandoned_by,
                difficulty=self.difficulty.level,
                seconds_remaining=seconds_remaining,
                players=tuple(
                    PlayerResult(
                        player_id=player.player_id,
                        username=player.username,
                        guesses=tuple(player.guesses),
                    )
                    for player in self.players
                ),
            )

    def get_player(self, player_id: str) -> Player:
        with self._lock:
            return self._get_player(player_id)

    def opponent_of(self, player_id: str) -> Player:
        with self._lock:
            return self._opponent_of(player_id)

    # -- PRIVATE HELPERS ---
    def _get_player(self, player_id: str) -> Player:
        for player in self.players:
            if player.player_id == player_id:
                return player
        raise MatchSetupError(f"Player {player_id!r} is not part of match {self.match_id}.")

    def _opponent_of(self, player_id: str) -> Player:
        return next(player for player in self.players if player.player_id != player_id)

    def _assert_setup_open(self, player_id: str) -> None:
        if self.status != MatchStatus.CREATED:
            raise MatchSetupError(
                f"Secret words can only be submitted before the match starts. status: {self.status}"
            )
        if self._get_player(player_id).secret_word is not None:
            raise MatchSetupError("You already submitted your secret word.")

    def _assert_in_progress(self) -> None:
        if self.status != MatchStatus.IN_PROGRESS:
            raise MatchNotInProgressError(f"Match is not in progress. status: {self.status}")

    def _assert_your_turn(self, player_id: str) -> None:
        """You must wait for your turn before submitting a guess."""
        self._get_player(player_id)
        if player_id != self.active_player_id:
            raise NotActivePlayerError(
                f"It is not your turn. Waiting for player {self.active_player_id} to guess first."
            )

    def _validate_guess(self, player_id: str, word: str) -> Word:
        """Any reason to reject the word itself becomes an InvalidGuessError. NetworkUnavailableError passes through."""
        try:
            candidate = Word.parse(word)
            if len(candidate) != self.word_length:
                raise BadLengthError(
                    f"Guess must have {self.word_length} letters, got {len(candidate)}."
                )
            return self.validator.validate(candidate).normalized_word
        except (BadLengthError, InvalidWordFormatError, NotInDictionaryError) as exc:
            logger.warning("Rejected guess from %s in match %s: %s", player_id, self.match_id, exc)
            raise InvalidGuessError(str(exc)) from exc

    def _is_ready_to_start(self) -> bool:
        return len(self.players) == 2 and all(
            player.secret_word is not None for player in self.players
        )

    def _begin(self) -> None:
        """Created -> InProgress. The creator plays first."""
        self.status = MatchStatus.IN_PROGRESS
        self.active_player_id = self.creator_id
        self._started_at = self.clock.scheduler.now()
        logger.info("Match %s started, %s to guess first", self.match_id, self.creator_id)
        self._start_turn()

    def _start_turn(self) -> None:
        """Open a new turn for the active player. The turn index doubles as the expiry's cancellation token."""
        self.turn_index += 1
        turn_token = self.turn_index
        self.clock.start(
            self.difficulty.turn_duration, lambda: self._on_turn_expired(turn_token)
        )

    def _apply_guess(self, player: Player, word: Word) -> Guess:
        opponent = self._opponent_of(player.player_id)
        # for the type checker: a match in progress always has both secrets
        assert opponent.secret_word is not None

        guess = Guess(
            word=word,
            feedback=score(opponent.secret_word, word),
            submitted_by=player.player_id,
            turn_index=self.turn_index,
            submitted_at=self.elapsed_seconds(),
        )
        player.record(guess)
        logger.info(
            "Match %s: %s guessed %s -> %s",
            self.match_id,
            player.player_id,
            word,
            ",".join(status.value for status in guess.feedback),
        )

        if guess.is_solved:
            player.has_won = True
            self._finish(MatchStatus.WON, winner_id=player.player_id)
        elif self._everyone_out_of_attempts() or self._is_time_budget_spent():
            self._resolve_without_solve()
        else:
            self._pass_turn()
        return guess

    def _on_turn_expired(self, turn_token: int) -> None:
        """
        TurnClock callback (scheduler thread). The active player forfeits the turn: nothing is recorded
        and no attempt is consumed. A stale expiry (match over, or the turn moved on) is a no-op.
        """
        with self._lock:
            if self.status != MatchStatus.IN_PROGRESS or turn_token != self.turn_index:
                logger.debug("Ignoring stale turn expiry for match %s", self.match_id)
                return
            logger.info(
                "Match %s: %s ran out of time and forfeits the turn", self.match_id, self.active_player_id
            )
            if self._is_time_budget_spent():
                self._resolve_without_solve()
            else:
                self._pass_turn()
        self._notify()

    def _pass_turn(self) -> None:
        """Hand the turn to the opponent, unless they cannot guess anymore."""
        # for the type checker
        assert self.active_player_id is not None
        opponent = self._opponent_of(self.active_player_id)
        if not opponent.is_out_of_attempts:
            self.active_player_id = opponent.player_id
        self._start_turn()

    def _everyone_out_of_attempts(self) -> bool:
        return all(player.is_out_of_attempts for player in self.players)

    def _is_time_budget_spent(self) -> bool:
        return self.elapsed_seconds() >= self.difficulty.match_time_limit

    def _resolve_without_solve(self) -> None:
        winner_id = resolve_without_solve(self.players, self.tie_break)
        if winner_id is None:
            self._finish(MatchStatus.TIED)
        else:
            self._get_player(winner_id).has_won = True
            self._finish(MatchStatus.WON, winner_id=winner_id)

    def _finish(self, status: MatchStatus, winner_id: Optional[str] = None) -> None:
        """Terminal transition. The clock is canceled so no stale expiry can fire against the ended match."""
        self.clock.cancel()
        self._ended_elapsed = self.elapsed_seconds()
        self.status = status
        self.winner_id = winner_id
        logger.info("Match %s ended: %s (winner: %s)", self.match_id, status, winner_id)

    def _notify(self) -> None:
        if self.listener is not None:
            self.listener(self)
