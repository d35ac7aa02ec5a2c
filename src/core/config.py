"""
Configuration management.

All configuration is loaded from environment variables (optionally from a .env file) with sensible defaults.
"""

import os

from dotenv import load_dotenv

from src.core.shared_types import TieBreakPolicy

load_dotenv()


class Settings:
    """Settings read once at import time. Instantiate a subclass to override in tests."""

    # Persistence
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///word_duel.db")

    # External collaborators
    DICTIONARY_URL = os.getenv("DICTIONARY_URL", "http://localhost:3000/api")
    DICTIONARY_TIMEOUT_SECONDS = float(os.getenv("DICTIONARY_TIMEOUT_SECONDS", 3))
    PROFILE_URL = os.getenv("PROFILE_URL", "http://localhost:3000/api")
    PROFILE_TIMEOUT_SECONDS = float(os.getenv("PROFILE_TIMEOUT_SECONDS", 3))
    PROFILE_CACHE_TTL_SECONDS = float(os.getenv("PROFILE_CACHE_TTL_SECONDS", 300))

    # Match rules
    TURN_DURATION_SECONDS = float(os.getenv("TURN_DURATION_SECONDS", 30))
    TIE_BREAK_POLICY = TieBreakPolicy(
        os.getenv("TIE_BREAK_POLICY", TieBreakPolicy.PURE_TIE.value)
    )
    ABANDON_PENALTY = int(os.getenv("ABANDON_PENALTY", 0))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
