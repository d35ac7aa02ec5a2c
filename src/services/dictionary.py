"""
Dictionary lookup over HTTP.

Contract of the dictionary service:
    POST {base_url}/validate-word {"word": "CRANE"}
    -> 200 {"success": true, "data": {"valid": true, "word": "CRANE"}}
    -> 400 {"success": false, "error": "...", "code": "VALIDATION_ERROR"}     word rejected
    -> 5xx {"success": false, "error": "...", "code": "SERVER_ERROR", "retryable": true}
"""

import logging
from typing import Optional

import requests

from src.core.exceptions import NetworkUnavailableError
from src.duel.word import Word

logger = logging.getLogger(__name__)

REJECTION_CODE = "VALIDATION_ERROR"


class HTTPDictionarySource:
    """DictionarySource backed by the dictionary service. Every call is bounded by `timeout` seconds."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 3.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/validate-word"
        self.timeout = timeout
        self.session = session or requests.Session()

    def contains(self, word: Word) -> bool:
        try:
            response = self.session.post(self.url, json={"word": str(word)}, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Dictionary service unreachable: %s", exc)
            raise NetworkUnavailableError("Dictionary service temporarily unavailable.") from exc

        if response.status_code >= 500:
            logger.warning("Dictionary service answered %s", response.status_code)
            raise NetworkUnavailableError("Dictionary service temporarily unavailable.")

        try:
            payload = response.json()
        except ValueError as exc:
            raise NetworkUnavailableError("Dictionary service sent an unreadable answer.") from exc

        if payload.get("success"):
            return bool((payload.get("data") or {}).get("valid", False))

        # A rejection is an answer, not an outage
        if payload.get("code") == REJECTION_CODE and not payload.get("retryable", False):
            return False

        logger.warning("Dictionary service failed: %s", payload.get("error"))
        raise NetworkUnavailableError(payload.get("error") or "Dictionary service failed.")
