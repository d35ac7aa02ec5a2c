"""Implementation of (Match|Leaderboard)Repository using SQLAlchemy"""

from dataclasses import asdict
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.models import GuessModel, LeaderboardRecord, MatchModel, PlayerModel
from src.db.schema import DBAppliedScore, DBLeaderboardEntry, DBMatch, utc_now


class SQLMatchRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_match(self, match_id: UUID) -> MatchModel | None:
        """Get match by ID, if record exists."""
        match_db = self._fetch_match(match_id)
        if match_db:
            return self._to_model(match_db)
        return None

    def save_match(self, match_id: UUID, match: MatchModel) -> MatchModel:
        """Insert a new record, or overwrite the existing one."""
        match_db = self._fetch_match(match_id)
        if not match_db:
            match_db = DBMatch(id=match_id)
            self.db.add(match_db)
        match_db.word_length = match.word_length
        match_db.difficulty = match.difficulty
        match_db.status = match.status
        match_db.creator_id = match.creator_id
        match_db.active_player_id = match.active_player_id
        match_db.winner_id = match.winner_id
        match_db.abandoned_by = match.abandoned_by
        match_db.turn_index = match.turn_index
        match_db.elapsed_seconds = match.elapsed_seconds
        match_db.players = [asdict(player) for player in match.players]
        _commit(self.db)
        self.db.refresh(match_db)
        return self._to_model(match_db)

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        """Remove a match's record."""
        match_db = self._fetch_match(match_id)
        if not match_db:
            return None
        match_model = self._to_model(match_db)
        self.db.delete(match_db)
        _commit(self.db)
        return match_model

    def _fetch_match(self, match_id: UUID) -> DBMatch | None:
        query = select(DBMatch).where(DBMatch.id == match_id)
        return self.db.scalar(query)

    def _to_model(self, match_db: DBMatch) -> MatchModel:
        """Convert SQLAlchemy model to data transfer model."""
        return MatchModel(
            word_length=match_db.word_length,
            difficulty=match_db.difficulty,
            status=match_db.status,
            players=[_player_from_json(player) for player in match_db.players],
            creator_id=match_db.creator_id,
            active_player_id=match_db.active_player_id,
            winner_id=match_db.winner_id,
            abandoned_by=match_db.abandoned_by,
            turn_index=match_db.turn_index,
            elapsed_seconds=match_db.elapsed_seconds,
        )


class SQLLeaderboardRepository:
    """User totals in one table, plus a ledger of applied (match, user) results for idempotence."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def apply_delta(
        self, match_id: UUID, user_id: str, username: str, delta: int, coins: int = 0, won: bool = False
    ) -> bool:
        if self.db.get(DBAppliedScore, (match_id, user_id)) is not None:
            return False

        now = utc_now()
        entry_db = self.db.get(DBLeaderboardEntry, user_id)
        if entry_db is None:
            entry_db = DBLeaderboardEntry(
                user_id=user_id,
                username=username,
                points=0,
                coins=0,
                games_played=0,
                games_won=0,
                achieved_at=now,
            )
            self.db.add(entry_db)
        entry_db.username = username
        if delta != 0:
            entry_db.points += delta
            entry_db.achieved_at = now
        entry_db.coins += coins
        entry_db.games_played += 1
        if won:
            entry_db.games_won += 1

        self.db.add(DBAppliedScore(match_id=match_id, user_id=user_id, delta=delta, applied_at=now))
        _commit(self.db)
        return True

    def get_entry(self, user_id: str) -> LeaderboardRecord | None:
        entry_db = self.db.get(DBLeaderboardEntry, user_id)
        if entry_db:
            return self._to_record(entry_db)
        return None

    def list_entries(self, limit: Optional[int] = None) -> list[LeaderboardRecord]:
        query = select(DBLeaderboardEntry).order_by(
            DBLeaderboardEntry.points.desc(),
            DBLeaderboardEntry.achieved_at,
            DBLeaderboardEntry.user_id,
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_record(entry_db) for entry_db in self.db.scalars(query)]

    def _to_record(self, entry_db: DBLeaderboardEntry) -> LeaderboardRecord:
        return LeaderboardRecord(
            user_id=entry_db.user_id,
            username=entry_db.username,
            points=entry_db.points,
            achieved_at=entry_db.achieved_at,
            coins=entry_db.coins,
            games_played=entry_db.games_played,
            games_won=entry_db.games_won,
        )


def _player_from_json(data: dict[str, Any]) -> PlayerModel:
    return PlayerModel(
        player_id=data["player_id"],
        username=data["username"],
        secret_word=data["secret_word"],
        guesses=[GuessModel(**guess) for guess in data["guesses"]],
        remaining_attempts=data["remaining_attempts"],
        has_won=data["has_won"],
    )


def _commit(db: Session) -> None:
    """Commit, or roll back so the session stays usable for the next write."""
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
