"""App-level access tokens via the client-credentials grant."""

import asyncio
import logging
import time
from collections.abc import Callable

import httpx

from artistgraph.domain.exceptions import (
    ExternalServiceError,
    TokenRefreshException,
)
from artistgraph.domain.ports import IAppTokenProvider
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)

# Refresh this many seconds before Spotify says the token expires
EXPIRY_BUFFER_SECONDS = 60.0


class ClientCredentialsProvider(IAppTokenProvider):
    """Caches one client-credentials token per provider instance.

    Hey future me - artist search doesn't need the user to be logged in, so it
    runs on an APP token instead. Tokens live an hour; we reuse the cached one
    until 60s before expiry. The lock makes concurrent searches share one
    token request instead of stampeding the token endpoint.
    """

    def __init__(
        self,
        client: SpotifyClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    def _cached(self) -> str | None:
        if self._token and self._clock() < self._expires_at - EXPIRY_BUFFER_SECONDS:
            return self._token
        return None

    async def get_token(self) -> str:
        """Return a valid app token.

        Raises:
            ConfigurationError: Client id/secret not configured
            ExternalServiceError: Token endpoint rejected the request or
                answered without a usable token
        """
        token = self._cached()
        if token:
            return token

        async with self._lock:
            token = self._cached()
            if token:
                return token
            try:
                data = await self._client.request_client_credentials_token()
            except (httpx.HTTPError, TokenRefreshException) as e:
                self.invalidate()
                raise ExternalServiceError(
                    "Failed to authenticate with Spotify"
                ) from e

            token = data.get("access_token")
            if not token:
                self.invalidate()
                raise ExternalServiceError(
                    "Spotify token response carried no access token"
                )

            expires_in = float(data.get("expires_in") or 3600)
            self._token = token
            self._expires_at = self._clock() + expires_in
            logger.info("Fetched new app token, expires in %ss", int(expires_in))
            return self._token

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0
