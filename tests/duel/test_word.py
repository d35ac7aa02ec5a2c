"""Unit tests for src/duel/word.py"""

import pytest

from src.core.exceptions import BadLengthError, InvalidWordFormatError
from src.duel.word import Word


@pytest.mark.parametrize("text", ["BIRD", "CRANE"])
def test_word_valid_lengths(text: str) -> None:
    word = Word(text)
    assert len(word) == len(text)
    assert str(word) == text
    assert list(word) == list(text)


@pytest.mark.parametrize("text", ["", "CAT", "CRANES", "ABCDEFG"])
def test_word_bad_length(text: str) -> None:
    with pytest.raises(BadLengthError):
        Word(text)


@pytest.mark.parametrize("text", ["CR4NE", "CRA E", "BIR-", "crane", "ÄPFEL"])
def test_word_invalid_format(text: str) -> None:
    with pytest.raises(InvalidWordFormatError):
        Word(text)


def test_length_is_checked_before_alphabet() -> None:
    """A wrong length is reported as such, even when the characters are invalid too."""
    with pytest.raises(BadLengthError):
        Word("1234567")


def test_parse_normalizes_case_and_whitespace() -> None:
    assert Word.parse("  crane ") == Word("CRANE")
    assert Word.parse("BiRd") == Word("BIRD")


def test_parse_keeps_rejecting_inner_characters() -> None:
    with pytest.raises(InvalidWordFormatError):
        Word.parse("c4t5")
