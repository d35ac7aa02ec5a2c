"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBMatch(Base):
    __tablename__ = "matches"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    word_length: Mapped[int]
    difficulty: Mapped[str]
    status: Mapped[str]
    creator_id: Mapped[str]
    active_player_id: Mapped[Optional[str]]
    winner_id: Mapped[Optional[str]]
    abandoned_by: Mapped[Optional[str]]
    turn_index: Mapped[int] = mapped_column(default=0)
    elapsed_seconds: Mapped[float] = mapped_column(default=0.0)
    players: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBLeaderboardEntry(Base):
    __tablename__ = "leaderboard"
    user_id: Mapped[str] = mapped_column(primary_key=True)
    username: Mapped[str]
    points: Mapped[int] = mapped_column(default=0)
    coins: Mapped[int] = mapped_column(default=0)
    games_played: Mapped[int] = mapped_column(default=0)
    games_won: Mapped[int] = mapped_column(default=0)
    achieved_at: Mapped[datetime] = mapped_column(default=utc_now)


class DBAppliedScore(Base):
    """One row per (match, user) whose delta was already added to the leaderboard."""

    __tablename__ = "applied_scores"
    match_id: Mapped[UUID] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(primary_key=True)
    delta: Mapped[int]
    applied_at: Mapped[datetime] = mapped_column(default=utc_now)
