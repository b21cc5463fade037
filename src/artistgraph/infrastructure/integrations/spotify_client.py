"""Spotify HTTP client: raw rate-limited requests, URL builders, token grants."""

import base64
import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from artistgraph.config.settings import SpotifySettings
from artistgraph.domain.exceptions import ConfigurationError, TokenRefreshException
from artistgraph.domain.value_objects.release_groups import (
    ALL_RELEASE_GROUPS,
    ReleaseGroup,
    include_groups_param,
)
from artistgraph.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class SpotifyClient:
    """Thin HTTP client for the Spotify Web API.

    Hey future me - this client does NOT interpret status codes for API calls!
    ``request()`` hands back the raw ``httpx.Response`` and the
    AuthenticatedCaller decides what a 401 or a 500 means. Only the token
    grants (which have no refresh-and-retry) translate errors themselves.
    """

    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    API_BASE_URL = "https://api.spotify.com/v1"

    # The httpx client is created lazily in _get_client(), creating it here
    # would bind it to whatever loop (if any) is running at construction time.
    def __init__(
        self,
        settings: SpotifySettings,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            rate_limiter: Shared limiter, a Spotify-tuned one is built if None
        """
        self.settings = settings
        self.rate_limiter = rate_limiter or RateLimiter.for_spotify(
            max_tokens=settings.rate_limit_max_tokens,
            refill_rate=settings.rate_limit_refill_rate,
        )
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client. Leaks connections if forgotten!"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SpotifyClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # =========================================================================
    # API REQUESTS
    # =========================================================================

    async def request(
        self,
        method: str,
        url: str,
        access_token: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Make one rate-limited API request.

        Hey future me - ALL Web API calls go through here so the token bucket
        sees every one of them. There is NO retry on 429, the response is
        returned as-is and turns into RemoteApiError upstream.

        Args:
            method: HTTP method (GET, POST, ...)
            url: Absolute URL (builders below, or a ``next`` cursor)
            access_token: Bearer token
            params: Extra query parameters
            json: JSON body for POST/PUT

        Returns:
            The raw response, whatever its status

        Raises:
            httpx.HTTPError: Only for transport failures (timeouts, DNS, ...)
        """
        client = await self._get_client()
        async with self.rate_limiter:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        logger.debug("Spotify %s %s -> %s", method, url, response.status_code)
        return response

    # =========================================================================
    # URL BUILDERS
    # =========================================================================

    def artist_albums_url(
        self,
        artist_id: str,
        limit: int = 50,
        groups: tuple[ReleaseGroup, ...] = ALL_RELEASE_GROUPS,
    ) -> str:
        """First page of an artist's releases across all release groups."""
        query = urlencode(
            {"include_groups": include_groups_param(groups), "limit": limit},
            safe=",",
        )
        return f"{self.API_BASE_URL}/artists/{quote(artist_id)}/albums?{query}"

    def albums_url(self, album_ids: list[str]) -> str:
        """Bulk album details (max 20 ids, Spotify rejects more)."""
        query = urlencode(
            {"ids": ",".join(album_ids), "market": self.settings.market}, safe=","
        )
        return f"{self.API_BASE_URL}/albums?{query}"

    def current_user_url(self) -> str:
        return f"{self.API_BASE_URL}/me"

    def create_playlist_url(self, user_id: str) -> str:
        return f"{self.API_BASE_URL}/users/{quote(user_id)}/playlists"

    def playlist_tracks_url(self, playlist_id: str) -> str:
        return f"{self.API_BASE_URL}/playlists/{quote(playlist_id)}/tracks"

    def search_url(self, query: str, search_type: str = "artist", limit: int = 5) -> str:
        """Search endpoint URL, the query is percent-encoded."""
        params = urlencode({"q": query, "type": search_type, "limit": limit})
        return f"{self.API_BASE_URL}/search?{params}"

    # =========================================================================
    # TOKEN GRANTS
    # =========================================================================

    async def refresh_token(self, refresh_token: str) -> dict[str, Any]:
        """Exchange a refresh token for a new access token.

        Args:
            refresh_token: Refresh token from the user's authorization

        Returns:
            Token response with access_token, expires_in and possibly a
            rotated refresh_token

        Raises:
            TokenRefreshException: Refresh token invalid/revoked, or the
                endpoint answered 2xx with a body that isn't a JSON object
            httpx.HTTPStatusError: For other HTTP errors (e.g. 5xx)
        """
        client = await self._get_client()
        response = await client.post(
            self.TOKEN_URL,
            data={
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.settings.client_id,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

        # Check for invalid_grant BEFORE raise_for_status, Spotify answers a
        # revoked refresh token with 400 {"error": "invalid_grant"}
        if response.status_code == 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if isinstance(error_data, dict) and error_data.get("error") == "invalid_grant":
                description = error_data.get(
                    "error_description", "Refresh token is invalid or has been revoked"
                )
                raise TokenRefreshException(
                    message=f"Refresh token invalid: {description}",
                    error_code="invalid_grant",
                    http_status=400,
                )

        if response.status_code in (401, 403):
            raise TokenRefreshException(
                message="Spotify access denied. Please re-authenticate with Spotify.",
                error_code="access_denied",
                http_status=response.status_code,
            )

        response.raise_for_status()
        return self._token_body(response)

    async def request_client_credentials_token(self) -> dict[str, Any]:
        """Fetch an app-level token via the client-credentials grant.

        This token can search the catalog but cannot touch user data, and
        ``market=from_token`` does NOT work with it.

        Returns:
            Token response with access_token and expires_in

        Raises:
            ConfigurationError: If client id or secret is missing
            TokenRefreshException: Token endpoint answered with a malformed body
            httpx.HTTPStatusError: If Spotify rejects the grant
        """
        if not self.settings.client_id or not self.settings.client_secret:
            raise ConfigurationError(
                "SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET must both be set "
                "for artist search."
            )

        credentials = f"{self.settings.client_id}:{self.settings.client_secret}"
        basic = base64.b64encode(credentials.encode("utf-8")).decode("ascii")

        client = await self._get_client()
        response = await client.post(
            self.TOKEN_URL,
            data={"grant_type": "client_credentials"},
            headers={
                "Authorization": f"Basic {basic}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
        )
        response.raise_for_status()
        return self._token_body(response)

    @staticmethod
    def _token_body(response: httpx.Response) -> dict[str, Any]:
        # Proxies and captive portals answer 200 with HTML now and then
        try:
            data = response.json()
        except ValueError as e:
            raise TokenRefreshException(
                message="Spotify token endpoint returned a malformed response.",
                error_code="invalid_response",
                http_status=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise TokenRefreshException(
                message="Spotify token endpoint returned a malformed response.",
                error_code="invalid_response",
                http_status=response.status_code,
            )
        return data


__all__ = ["SpotifyClient"]
