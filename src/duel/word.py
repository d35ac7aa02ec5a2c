"""
A word in the duel: either a secret word or a guess.

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_uppercase

from src.core.exceptions import BadLengthError, InvalidWordFormatError

WORD_LENGTHS = (4, 5)


@dataclass(frozen=True)
class Word:
    letters: str

    def __post_init__(self) -> None:
        if len(self.letters) not in WORD_LENGTHS:
            raise BadLengthError(
                f"Word must have {' or '.join(map(str, WORD_LENGTHS))} letters, got {len(self.letters)}."
            )
        if not all(character in ascii_uppercase for character in self.letters):
            raise InvalidWordFormatError(
                f"Word may only contain the letters A-Z, got {self.letters!r}."
            )

    @classmethod
    def parse(cls, text: str) -> Word:
        """Case-insensitive: ' crane ' becomes CRANE. Length is checked before the alphabet."""
        return cls(text.strip().upper())

    def __len__(self) -> int:
        return len(self.letters)

    def __iter__(self):
        return iter(self.letters)

    def __str__(self) -> str:
        return self.letters
