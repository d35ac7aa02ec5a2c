"""
Player identity lookup.

The profile of a player is fetched from the identity service and cached by ProfileLookup.
The cache belongs to the ProfileLookup instance (explicit lifecycle: get / invalidate / clear), not to the process.
A failed lookup never fails a match: the player just plays under a generated anonymous name.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol
from urllib.parse import quote

import requests

from src.core.exceptions import ProfileUnavailableError

logger = logging.getLogger(__name__)

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

ANON_ADJECTIVES = (
    "Brave", "Clever", "Swift", "Quiet", "Lucky", "Sunny", "Witty", "Bold",
    "Calm", "Eager", "Jolly", "Noble", "Proud", "Quick", "Sharp", "Zesty",
)
ANON_NOUNS = (
    "Otter", "Falcon", "Badger", "Panda", "Heron", "Lynx", "Koala", "Raven",
    "Gecko", "Moose", "Bison", "Finch", "Tapir", "Yak", "Newt", "Wombat",
)


@dataclass(frozen=True)
class Profile:
    user_id: str
    username: str
    profile_picture: str
    is_reddit_profile: bool = False
    is_anonymous: bool = False


def anonymous_name(user_id: str) -> str:
    """Deterministic: the same user id always gets the same name."""
    digest = hashlib.sha256(user_id.encode("utf-8")).digest()
    adjective = ANON_ADJECTIVES[digest[0] % len(ANON_ADJECTIVES)]
    noun = ANON_NOUNS[digest[1] % len(ANON_NOUNS)]
    number = int.from_bytes(digest[2:4], "big") % 1000
    return f"{adjective}{noun}{number:03d}"


def anonymous_profile(user_id: str) -> Profile:
    username = anonymous_name(user_id)
    return Profile(
        user_id=user_id,
        username=username,
        profile_picture=AVATAR_URL.format(seed=quote(username)),
        is_anonymous=True,
    )


class ProfileSource(Protocol):
    def fetch(self, user_id: str) -> Profile:
        """Raise ProfileUnavailableError when the profile cannot be retrieved."""
        ...


class HTTPProfileSource:
    """
    GET {base_url}/user-profile?userId=...
    -> {"success": true, "data": {"profile": {"userId", "username", "profilePicture", "isRedditProfile"}}}
    """

    def __init__(
        self, base_url: str, timeout: float = 3.0, session: Optional[requests.Session] = None
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/user-profile"
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, user_id: str) -> Profile:
        try:
            response = self.session.get(self.url, params={"userId": user_id}, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProfileUnavailableError(f"Profile lookup failed for {user_id}.") from exc

        profile = (payload.get("data") or {}).get("profile") if payload.get("success") else None
        if not profile:
            raise ProfileUnavailableError(payload.get("error") or "Profile lookup failed.")

        username = profile.get("username") or anonymous_name(user_id)
        return Profile(
            user_id=profile.get("userId") or user_id,
            username=username,
            profile_picture=profile.get("profilePicture") or AVATAR_URL.format(seed=quote(username)),
            is_reddit_profile=bool(profile.get("isRedditProfile", False)),
        )


class ProfileLookup:
    """Caches successful lookups for `ttl_seconds`. Failed lookups are not cached, so they get retried."""

    def __init__(
        self,
        source: ProfileSource,
        ttl_seconds: float = 300.0,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._now = now
        self._cache: dict[str, tuple[float, Profile]] = {}

    def get(self, user_id: str) -> Profile:
        cached = self._cache.get(user_id)
        if cached is not None:
            stored_at, profile = cached
            if self._now() - stored_at < self.ttl_seconds:
                return profile
            del self._cache[user_id]

        try:
            profile = self.source.fetch(user_id)
        except ProfileUnavailableError as exc:
            logger.warning("Playing %s anonymously: %s", user_id, exc)
            return anonymous_profile(user_id)

        self._cache[user_id] = (self._now(), profile)
        return profile

    def invalidate(self, user_id: str) -> None:
        self._cache.pop(user_id, None)

    def clear(self) -> None:
        self._cache.clear()
