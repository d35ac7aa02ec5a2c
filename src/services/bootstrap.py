"""Wire the MatchService together from Settings (HTTP collaborators + SQL repositories)."""

from typing import Optional

from sqlalchemy.orm import Session

from src.core.config import Settings, settings
from src.core.logging_setup import configure_logging
from src.db.sql_repository import SQLLeaderboardRepository, SQLMatchRepository
from src.duel.clock import Scheduler
from src.duel.scoring import LeaderboardScorer
from src.duel.validator import WordValidator
from src.services.dictionary import HTTPDictionarySource
from src.services.match_service import MatchService
from src.services.profiles import HTTPProfileSource, ProfileLookup


def build_match_service(
    db_session: Optional[Session] = None,
    config: Settings = settings,
    scheduler: Optional[Scheduler] = None,
) -> MatchService:
    """Without a session, one is opened on the configured DATABASE_URL (tables are created on first use)."""
    configure_logging(config.LOG_LEVEL)
    if db_session is None:
        # imported here: creating the engine touches the database
        from src.db.database import SessionLocal

        db_session = SessionLocal()

    validator = WordValidator(
        HTTPDictionarySource(config.DICTIONARY_URL, timeout=config.DICTIONARY_TIMEOUT_SECONDS)
    )
    profiles = ProfileLookup(
        HTTPProfileSource(config.PROFILE_URL, timeout=config.PROFILE_TIMEOUT_SECONDS),
        ttl_seconds=config.PROFILE_CACHE_TTL_SECONDS,
    )
    return MatchService(
        matches=SQLMatchRepository(db_session),
        leaderboard=SQLLeaderboardRepository(db_session),
        validator=validator,
        profiles=profiles,
        scorer=LeaderboardScorer(abandon_penalty=config.ABANDON_PENALTY),
        scheduler=scheduler,
        turn_duration=config.TURN_DURATION_SECONDS,
        tie_break=config.TIE_BREAK_POLICY,
    )
