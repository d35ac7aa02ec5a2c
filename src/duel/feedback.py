"""
Letter-by-letter feedback for a guess against a secret word.

Algorithm (two-pass):
  1) mark every exact positional match CORRECT, and count the secret's letters that were NOT matched.
  2) for every other position, mark PRESENT if that letter still has availability left (and consume one), else ABSENT.

Resolving all CORRECT matches before any PRESENT match, and consuming the counter as letters get used,
means a letter can never be reported (correct + present) more often than it occurs in the secret.
"""

from collections import Counter

from src.core.exceptions import LengthMismatchError
from src.core.shared_types import LetterStatus
from src.duel.word import Word

Feedback = tuple[LetterStatus, ...]


def score(secret: Word, guess: Word) -> Feedback:
    """Compute feedback for `guess` against `secret`. Both words must have the same length."""
    if len(secret) != len(guess):
        raise LengthMismatchError(
            f"Cannot score a {len(guess)}-letter guess against a {len(secret)}-letter word."
        )

    statuses = [LetterStatus.ABSENT] * len(guess)

    # Pass 1: exact matches. Unmatched secret letters stay available for pass 2.
    available: Counter[str] = Counter()
    for i, (secret_letter, guess_letter) in enumerate(zip(secret, guess)):
        if secret_letter == guess_letter:
            statuses[i] = LetterStatus.CORRECT
        else:
            available[secret_letter] += 1

    # Pass 2: misplaced letters, capped by what is still available.
    for i, guess_letter in enumerate(guess):
        if statuses[i] == LetterStatus.CORRECT:
            continue
        if available[guess_letter] > 0:
            statuses[i] = LetterStatus.PRESENT
            available[guess_letter] -= 1

    return tuple(statuses)


def is_solved(feedback: Feedback) -> bool:
    return all(status == LetterStatus.CORRECT for status in feedback)


def progress(feedback: Feedback) -> int:
    """Number of letters that were either correct or present."""
    return sum(1 for status in feedback if status != LetterStatus.ABSENT)
