"""
Word validation against a dictionary source.

The dictionary itself is an external collaborator (see src/services/dictionary.py for the HTTP one).
WordValidator only normalizes, checks the shape of the word, and asks the source.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol

from src.core.exceptions import NotInDictionaryError
from src.duel.word import Word

logger = logging.getLogger(__name__)


class DictionarySource(Protocol):
    """Anything that can answer 'is this a word?'. May raise NetworkUnavailableError."""

    def contains(self, word: Word) -> bool: ...


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    normalized_word: Word


class WordListSource:
    """Dictionary held in memory. Case-insensitive."""

    def __init__(self, words: Iterable[str]) -> None:
        self._words = frozenset(word.strip().upper() for word in words)

    def contains(self, word: Word) -> bool:
        return word.letters in self._words

    def __len__(self) -> int:
        return len(self._words)


class WordValidator:
    """Stateless per call: the same word always gives the same verdict (for the same source)."""

    def __init__(self, source: DictionarySource) -> None:
        self.source = source

    def validate(self, word: str | Word) -> ValidationResult:
        """
        Normalize and validate a candidate secret word / guess.
        ----

        1. normalize case / whitespace
        2. length and alphabet checks (BadLengthError / InvalidWordFormatError) BEFORE any lookup
        3. dictionary lookup (NotInDictionaryError, or NetworkUnavailableError from the source)
        """
        normalized = word if isinstance(word, Word) else Word.parse(word)

        if not self.source.contains(normalized):
            logger.info("Rejected %s: not in dictionary", normalized)
            raise NotInDictionaryError(f"{normalized} is not in the dictionary.")

        return ValidationResult(valid=True, normalized_word=normalized)
