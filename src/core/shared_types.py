"""
Type definitions used across layers
"""

from enum import StrEnum


class MatchStatus(StrEnum):
    CREATED = "created"
    IN_PROGRESS = "in progress"
    WON = "won"
    TIED = "tied"
    ABANDONED = "abandoned"


TERMINAL_STATUSES = frozenset({MatchStatus.WON, MatchStatus.TIED, MatchStatus.ABANDONED})


class LetterStatus(StrEnum):
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    DIFFICULT = "difficult"


class ClockState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"
    CANCELED = "canceled"


class TieBreakPolicy(StrEnum):
    """What happens when both players run out of attempts without solving."""

    PURE_TIE = "pure tie"
    PROGRESS = "progress"
