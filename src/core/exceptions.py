"""
Custom exceptions shared by all layers.

Every exception derives from GameError so the service / api layers can catch one top-level type.
`retryable` tells the caller whether the same request may succeed later without user input changing.
"""


class GameError(Exception):
    """Top-level exception for anything raised by this application."""

    retryable: bool = False


# --- WORD VALIDATION ---
class ValidationError(GameError):
    """A submitted word was rejected (or could not be checked)."""


class BadLengthError(ValidationError):
    pass


class InvalidWordFormatError(ValidationError):
    pass


class NotInDictionaryError(ValidationError):
    pass


class NetworkUnavailableError(ValidationError):
    """The dictionary source could not be reached. NOT the same as 'word rejected'."""

    retryable = True


# --- MATCH ENGINE ---
class EngineError(GameError):
    pass


class LengthMismatchError(EngineError):
    pass


class InvalidGuessError(EngineError):
    pass


class NotActivePlayerError(EngineError):
    pass


class MatchNotInProgressError(EngineError):
    pass


class MatchSetupError(EngineError):
    """Joining / secret word submission was not possible in the current state."""


# --- TIMER ---
class TimerError(GameError):
    pass


# --- BOUNDARIES ---
class RepositoryError(GameError):
    pass


class ProfileUnavailableError(GameError):
    retryable = True


class InvalidRequestError(GameError):
    pass
