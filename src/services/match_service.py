"""Orchestration of communication from API layer to the match engine and persistence layers (and the reverse direction)."""

import logging
import threading
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from src.api.models import (
    AbandonMatchRequest,
    CreateMatchRequest,
    ExpireMatchRequest,
    GetMatchRequest,
    GuessRequest,
    GuessResponse,
    GuessView,
    JoinMatchRequest,
    LeaderboardEntryView,
    LeaderboardRequest,
    LeaderboardResponse,
    MatchResponse,
    PauseMatchRequest,
    PlayerView,
    ResumeMatchRequest,
    SubmitSecretRequest,
    ValidatedWord,
    ValidateWordRequest,
    ValidateWordResponse,
)
from src.core.exceptions import (
    GameError,
    NetworkUnavailableError,
    RepositoryError,
    ValidationError,
)
from src.core.shared_types import TERMINAL_STATUSES, MatchStatus, TieBreakPolicy
from src.db.repository import LeaderboardRepository, MatchRepository
from src.duel.clock import Scheduler, TurnClock
from src.duel.difficulty import DifficultySettings
from src.duel.match import Match
from src.duel.player import Guess, Player
from src.duel.scoring import LeaderboardEntry, LeaderboardScorer, coins_for, rank_entries
from src.duel.validator import WordValidator
from src.services.profiles import ProfileLookup

logger = logging.getLogger(__name__)


class MatchService:
    """
    Orchestration of layers for word duels.
    ----

    Matches in progress live in memory (their turn clocks are running); every transition of a match,
    including the timer-driven ones, is written to the MatchRepository.
    When a match ends, the point deltas are applied to the leaderboard once per (match, player).
    """

    def __init__(
        self,
        matches: MatchRepository,
        leaderboard: LeaderboardRepository,
        validator: WordValidator,
        profiles: ProfileLookup,
        scorer: Optional[LeaderboardScorer] = None,
        scheduler: Optional[Scheduler] = None,
        turn_duration: Optional[float] = None,
        tie_break: TieBreakPolicy = TieBreakPolicy.PURE_TIE,
    ) -> None:
        self.matches = matches
        self.leaderboard = leaderboard
        self.validator = validator
        self.profiles = profiles
        self.scorer = scorer or LeaderboardScorer()
        self.scheduler = scheduler
        self.turn_duration = turn_duration
        self.tie_break = tie_break
        self._live: dict[UUID, Match] = {}
        # matches whose latest transition could not be written yet
        self._unsaved: set[UUID] = set()
        self._registry_lock = threading.RLock()
        # repositories are also written from timer threads
        self._store_lock = threading.RLock()

    # -- API routes logic ---
    def create_match(self, request: CreateMatchRequest) -> MatchResponse:
        """First player requested to open a new match."""
        difficulty = DifficultySettings.for_level(request.difficulty)
        if self.turn_duration is not None:
            difficulty = difficulty.with_turn_duration(self.turn_duration)

        profile = self.profiles.get(request.player_id)
        match = Match.create(
            creator_id=request.player_id,
            username=profile.username,
            word_length=request.word_length,
            difficulty=difficulty,
            validator=self.validator,
            clock=TurnClock(self.scheduler),
            tie_break=self.tie_break,
            listener=self._on_match_changed,
        )
        self._persist(match)
        with self._registry_lock:
            self._live[match.match_id] = match
        return self._create_match_response(match, request.player_id)

    def join_match(self, request: JoinMatchRequest) -> MatchResponse:
        """Second player requested to join a match."""
        match = self._fetch_match(request.match_id)
        profile = self.profiles.get(request.player_id)
        match.join(request.player_id, username=profile.username)
        return self._create_match_response(match, request.player_id)

    def submit_secret(self, request: SubmitSecretRequest) -> MatchResponse:
        """A player registers the word the opponent has to guess. The match starts once both did."""
        match = self._fetch_match(request.match_id)
        match.submit_secret(request.player_id, request.secret_word)
        return self._create_match_response(match, request.player_id)

    def submit_guess(self, request: GuessRequest) -> GuessResponse:
        """Make a guess attempt."""
        match = self._fetch_match(request.match_id)
        guess = match.submit_guess(request.player_id, request.guess)
        return GuessResponse(
            guess=self._create_guess_view(guess),
            match=self._create_match_response(match, request.player_id),
        )

    def get_match_state(self, request: GetMatchRequest) -> MatchResponse:
        """
        Retrieve current match state, as seen by the requesting player.
        ----
        Used in "polling" loop by frontend to render the guess history and the turn countdown.
        """
        match = self._fetch_match(request.match_id)
        match.get_player(request.player_id)
        return self._create_match_response(match, request.player_id)

    def abandon_match(self, request: AbandonMatchRequest) -> MatchResponse:
        """Session layer reports a disconnect / quit."""
        match = self._fetch_match(request.match_id)
        match.abandon(request.player_id)
        return self._create_match_response(match, request.player_id)

    def expire_match(self, request: ExpireMatchRequest) -> MatchResponse:
        """Session layer reports the overall match time budget is spent."""
        match = self._fetch_match(request.match_id)
        match.end_on_time_budget()
        return self._create_match_response(match, None)

    def pause_match(self, request: PauseMatchRequest) -> MatchResponse:
        """
        Session layer stops the turn countdown (e.g. the active player lost the connection).
        Match time is not paused: if the budget runs out meanwhile, resuming ends the match.
        """
        match = self._fetch_match(request.match_id)
        match.pause_turn()
        return self._create_match_response(match, None)

    def resume_match(self, request: ResumeMatchRequest) -> MatchResponse:
        match = self._fetch_match(request.match_id)
        match.resume_turn()
        return self._create_match_response(match, None)

    def validate_word(self, request: ValidateWordRequest) -> ValidateWordResponse:
        """Pre-game check of a candidate secret word. Rejections are answers, outages are retryable."""
        try:
            result = self.validator.validate(request.word)
        except NetworkUnavailableError as exc:
            return ValidateWordResponse(
                success=False, error=str(exc), code="NETWORK_ERROR", retryable=True
            )
        except ValidationError as exc:
            return ValidateWordResponse(success=False, error=str(exc), code="VALIDATION_ERROR")
        return ValidateWordResponse(
            success=True,
            data=ValidatedWord(valid=result.valid, word=str(result.normalized_word)),
        )

    def get_leaderboard(self, request: LeaderboardRequest) -> LeaderboardResponse:
        with self._store_lock:
            ranked = rank_entries(self.leaderboard.list_entries())

        current = None
        if request.current_user_id is not None:
            current = next(
                (entry for entry in ranked if entry.user_id == request.current_user_id), None
            )
        return LeaderboardResponse(
            leaderboard=[self._create_entry_view(entry) for entry in ranked[: request.limit]],
            current_player_data=self._create_entry_view(current) if current else None,
        )

    # -- Internal helpers --
    def _on_match_changed(self, match: Match) -> None:
        """
        Match listener: runs after every committed transition (possibly on a timer thread).
        A failed write is logged and the match is marked unsaved; the next request for it retries the write.
        """
        try:
            self._persist(match)
            if match.is_over:
                self._apply_scores(match)
        except (GameError, SQLAlchemyError):
            logger.exception("Match %s: could not store the latest transition, will retry", match.match_id)
            with self._registry_lock:
                self._unsaved.add(match.match_id)
            return

        with self._registry_lock:
            self._unsaved.discard(match.match_id)
            if match.is_over:
                self._live.pop(match.match_id, None)

    def _persist(self, match: Match) -> None:
        with self._store_lock:
            self.matches.save_match(match.match_id, match.to_model())

    def _apply_scores(self, match: Match) -> None:
        """Idempotent: the repository ignores a (match, player) pair it already applied."""
        summary = match.summary()
        deltas = self.scorer.score(summary)
        with self._store_lock:
            for result in summary.players:
                delta = deltas[result.player_id]
                applied = self.leaderboard.apply_delta(
                    match.match_id,
                    result.player_id,
                    result.username,
                    delta,
                    coins=coins_for(delta),
                    won=result.player_id == summary.winner_id,
                )
                if applied:
                    logger.info("Match %s: %+d points for %s", match.match_id, delta, result.player_id)

    def _fetch_match(self, match_id: UUID) -> Match:
        """
        Live match if there is one, otherwise restore it from the repository; raise error if it fails.
        Lookup, restore and registration happen under one lock, so a match has at most one live instance.
        """
        with self._registry_lock:
            match = self._live.get(match_id)
            if match is None:
                match = self._restore_match(match_id)
                if not match.is_over:
                    self._live[match_id] = match
            retry = match_id in self._unsaved

        if retry:
            self._on_match_changed(match)
        return match

    def _restore_match(self, match_id: UUID) -> Match:
        with self._store_lock:
            model = self.matches.get_match(match_id)
        if model is None:
            raise RepositoryError(f"Match with {match_id=} not found.")

        match = Match.from_model(
            match_id=match_id,
            model=model,
            validator=self.validator,
            clock=TurnClock(self.scheduler),
            turn_duration=self.turn_duration,
            tie_break=self.tie_break,
            listener=self._on_match_changed,
        )
        if match.status == MatchStatus.IN_PROGRESS:
            # the previous owner's clock is gone: the active player gets a fresh turn
            match.restart_turn()
        return match

    def _create_match_response(self, match: Match, viewer_id: Optional[str]) -> MatchResponse:
        """Convert a Match into a MatchResponse. The opponent's secret stays hidden until the match is over."""
        model = match.to_model()
        status = MatchStatus(model.status)
        is_over = status in TERMINAL_STATUSES
        points = self.scorer.score(match.summary()) if is_over else None
        return MatchResponse(
            match_id=match.match_id,
            status=status,
            word_length=match.word_length,
            difficulty=match.difficulty.level,
            active_player_id=model.active_player_id,
            winner_id=model.winner_id,
            abandoned_by=model.abandoned_by,
            turn_time_remaining=match.turn_time_remaining(),
            players=[
                self._create_player_view(player, reveal=is_over or player.player_id == viewer_id)
                for player in (Player.from_model(player_model) for player_model in model.players)
            ],
            points=points,
        )

    def _create_player_view(self, player: Player, reveal: bool) -> PlayerView:
        return PlayerView(
            player_id=player.player_id,
            username=player.username,
            secret_word=str(player.secret_word) if reveal and player.secret_word else None,
            has_submitted_secret=player.secret_word is not None,
            guesses=[self._create_guess_view(guess) for guess in player.guesses],
            remaining_attempts=player.remaining_attempts,
            has_won=player.has_won,
        )

    def _create_guess_view(self, guess: Guess) -> GuessView:
        return GuessView(
            word=str(guess.word),
            feedback=list(guess.feedback),
            turn_index=guess.turn_index,
            submitted_at=guess.submitted_at,
        )

    def _create_entry_view(self, entry: LeaderboardEntry) -> LeaderboardEntryView:
        return LeaderboardEntryView(
            rank=entry.rank,
            user_id=entry.user_id,
            username=entry.username,
            points=entry.points,
            coins=entry.coins,
            games_played=entry.games_played,
            games_won=entry.games_won,
        )
