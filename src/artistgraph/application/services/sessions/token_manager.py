"""In-memory user token storage."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from artistgraph.domain.ports import ITokenStore

logger = logging.getLogger(__name__)


@dataclass
class TokenInfo:
    """A stored access token and the clock time it stops being valid."""

    access_token: str
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        """True once the clock passed ``expires_at`` (never, if unknown)."""
        return self.expires_at is not None and now >= self.expires_at


class TokenManager(ITokenStore):
    """Single-session token store kept in process memory.

    Hey future me - this behaves like a cookie jar: the access token lives
    for expires_in seconds and then simply vanishes, the refresh token never
    expires. So an expired access token is reported as ABSENT here, which
    makes the AuthenticatedCaller go straight to a refresh instead of burning
    a request on a guaranteed 401.

    The clock is injectable so tests can expire tokens without sleeping.
    """

    def __init__(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
        expires_in: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._access: TokenInfo | None = None
        self._refresh_token = refresh_token
        if access_token:
            self._access = TokenInfo(access_token, self._expiry(expires_in))

    def _expiry(self, expires_in: int | None) -> float | None:
        return None if expires_in is None else self._clock() + expires_in

    async def get_access_token(self) -> str | None:
        if self._access is None:
            return None
        if self._access.is_expired(self._clock()):
            logger.debug("Access token expired, dropping it")
            self._access = None
            return None
        return self._access.access_token

    async def get_refresh_token(self) -> str | None:
        return self._refresh_token

    async def set_access_token(
        self, access_token: str, expires_in: int | None = None
    ) -> None:
        self._access = TokenInfo(access_token, self._expiry(expires_in))

    async def set_refresh_token(self, refresh_token: str) -> None:
        self._refresh_token = refresh_token

    async def clear_access_token(self) -> None:
        self._access = None

    async def clear_all(self) -> None:
        self._access = None
        self._refresh_token = None
        logger.info("Cleared stored Spotify tokens")
