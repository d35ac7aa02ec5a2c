"""Protocol repositories (key-value contracts; the SQLAlchemy versions live in sql_repository.py)"""

from typing import Optional, Protocol
from uuid import UUID

from src.core.models import LeaderboardRecord, MatchModel


class MatchRepository(Protocol):
    """Persistence layer orchestration for match snapshots"""

    def get_match(self, match_id: UUID) -> MatchModel | None:
        """Get match by ID, if record exists."""
        ...

    def save_match(self, match_id: UUID, match: MatchModel) -> MatchModel:
        """Insert or overwrite the snapshot stored under match_id."""
        ...

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        """Remove a match's record."""
        ...


class LeaderboardRepository(Protocol):
    """Point totals per user. Rank is derived by the caller, never stored."""

    def apply_delta(
        self, match_id: UUID, user_id: str, username: str, delta: int, coins: int = 0, won: bool = False
    ) -> bool:
        """
        Add one match result to the user's record: delta points, coins, one game played (and won, if so).
        Applying the same (match_id, user_id) twice is a no-op returning False.
        """
        ...

    def get_entry(self, user_id: str) -> LeaderboardRecord | None:
        ...

    def list_entries(self, limit: Optional[int] = None) -> list[LeaderboardRecord]:
        """Records ordered by points (desc), then achieved_at, then user_id."""
        ...
