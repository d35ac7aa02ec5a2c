"""Unit tests for src/duel/tiebreak.py and the Player helpers it relies on"""

from src.core.models import GuessModel, PlayerModel
from src.core.shared_types import TieBreakPolicy
from src.duel.feedback import score
from src.duel.player import Guess, Player
from src.duel.tiebreak import resolve_without_solve
from src.duel.word import Word


def player_with_guesses(player_id: str, secret: str, *words: str) -> Player:
    player = Player(player_id=player_id, username=player_id.title(), remaining_attempts=len(words))
    for i, word in enumerate(words):
        player.record(
            Guess(
                word=Word(word),
                feedback=score(Word(secret), Word(word)),
                submitted_by=player_id,
                turn_index=i + 1,
            )
        )
    return player


def test_player_record_uses_attempts() -> None:
    player = player_with_guesses("alice", "ALLOW", "LLAMA", "APPLE")
    assert player.remaining_attempts == 0
    assert player.is_out_of_attempts
    assert len(player.guesses) == 2


def test_player_unlimited_attempts() -> None:
    player = Player(player_id="alice", username="Alice")
    player.record(Guess(Word("LLAMA"), score(Word("ALLOW"), Word("LLAMA")), "alice", 1))
    assert player.remaining_attempts is None
    assert not player.is_out_of_attempts


def test_best_progress() -> None:
    assert player_with_guesses("alice", "ALLOW", "APPLE", "LLAMA").best_progress() == 3
    assert Player(player_id="bob", username="Bob").best_progress() == 0


def test_player_from_model_roundtrip() -> None:
    model = PlayerModel(
        player_id="alice",
        username="Alice",
        secret_word="CRANE",
        guesses=[GuessModel("LLAMA", ["present", "correct", "present", "absent", "absent"], "alice", 1, 4.5)],
        remaining_attempts=9,
        has_won=False,
    )
    player = Player.from_model(model)
    assert player.secret_word == Word("CRANE")
    assert player.best_progress() == 3
    assert player.to_model() == model


def test_pure_tie_ignores_progress() -> None:
    alice = player_with_guesses("alice", "ALLOW", "LLAMA")
    bob = player_with_guesses("bob", "CRANE", "MOUSE")
    assert resolve_without_solve([alice, bob], TieBreakPolicy.PURE_TIE) is None


def test_progress_picks_the_closer_player() -> None:
    alice = player_with_guesses("alice", "ALLOW", "LLAMA")
    bob = player_with_guesses("bob", "CRANE", "MOUSE")
    assert resolve_without_solve([alice, bob], TieBreakPolicy.PROGRESS) == "alice"
    assert resolve_without_solve([bob, alice], TieBreakPolicy.PROGRESS) == "alice"


def test_progress_equal_is_still_a_tie() -> None:
    alice = player_with_guesses("alice", "ALLOW", "LLAMA")
    bob = player_with_guesses("bob", "CRANE", "STARE")
    assert resolve_without_solve([alice, bob], TieBreakPolicy.PROGRESS) is None
