"""Unit tests for src/services/dictionary.py"""

from unittest.mock import Mock

import pytest
import requests

from src.core.exceptions import NetworkUnavailableError, NotInDictionaryError
from src.duel.validator import WordValidator
from src.duel.word import Word
from src.services.dictionary import HTTPDictionarySource


def mock_session(status_code: int = 200, payload: dict | None = None) -> Mock:
    response = Mock(status_code=status_code)
    response.json.return_value = payload
    session = Mock(spec=requests.Session)
    session.post.return_value = response
    return session


def test_valid_word() -> None:
    session = mock_session(payload={"success": True, "data": {"valid": True, "word": "CRANE"}})
    source = HTTPDictionarySource("http://dictionary.local/api/", timeout=2.5, session=session)

    assert source.contains(Word("CRANE"))
    session.post.assert_called_once_with(
        "http://dictionary.local/api/validate-word", json={"word": "CRANE"}, timeout=2.5
    )


def test_rejected_word() -> None:
    session = mock_session(
        status_code=400,
        payload={"success": False, "error": "Not a valid word", "code": "VALIDATION_ERROR"},
    )
    source = HTTPDictionarySource("http://dictionary.local/api", session=session)
    assert not source.contains(Word("ZZZZZ"))

    # through the validator: a rejection, not an outage
    with pytest.raises(NotInDictionaryError):
        WordValidator(source).validate("zzzzz")


@pytest.mark.parametrize(
    "exception", [requests.Timeout("too slow"), requests.ConnectionError("no route to host")]
)
def test_unreachable_service(exception: Exception) -> None:
    session = Mock(spec=requests.Session)
    session.post.side_effect = exception
    source = HTTPDictionarySource("http://dictionary.local/api", session=session)

    with pytest.raises(NetworkUnavailableError) as exc_info:
        source.contains(Word("CRANE"))
    assert exc_info.value.retryable


def test_server_error() -> None:
    session = mock_session(
        status_code=503,
        payload={"success": False, "error": "overloaded", "code": "SERVER_ERROR", "retryable": True},
    )
    source = HTTPDictionarySource("http://dictionary.local/api", session=session)
    with pytest.raises(NetworkUnavailableError):
        source.contains(Word("CRANE"))


def test_retryable_failure_is_an_outage() -> None:
    session = mock_session(
        status_code=400,
        payload={"success": False, "error": "try again", "code": "VALIDATION_ERROR", "retryable": True},
    )
    source = HTTPDictionarySource("http://dictionary.local/api", session=session)
    with pytest.raises(NetworkUnavailableError):
        source.contains(Word("CRANE"))


def test_unreadable_answer() -> None:
    session = mock_session()
    session.post.return_value.json.side_effect = ValueError("not json")
    source = HTTPDictionarySource("http://dictionary.local/api", session=session)
    with pytest.raises(NetworkUnavailableError):
        source.contains(Word("CRANE"))


def test_success_without_data() -> None:
    session = mock_session(payload={"success": True, "data": None})
    source = HTTPDictionarySource("http://dictionary.local/api", session=session)
    assert not source.contains(Word("CRANE"))
