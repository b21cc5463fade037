"""Artist search for the seed picker.

Hey future me - search runs on an APP token (client credentials), not the
user's token. The user may not be logged in yet while they type, and a
search result is public catalog data anyway.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from artistgraph.application.services.credential_refresh import (
    decode_json,
    remote_error_message,
)
from artistgraph.config.settings import GraphSettings
from artistgraph.domain.entities import Artist
from artistgraph.domain.exceptions import ExternalServiceError, RemoteApiError
from artistgraph.domain.ports import IAppTokenProvider
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient
from artistgraph.infrastructure.integrations.spotify_converters import to_artist

logger = logging.getLogger(__name__)


class ArtistSearchService:
    """Looks up artists by name."""

    def __init__(
        self,
        client: SpotifyClient,
        token_provider: IAppTokenProvider,
        settings: GraphSettings | None = None,
    ) -> None:
        self._client = client
        self._token_provider = token_provider
        self._settings = settings or GraphSettings()

    async def search_artists(self, query: str) -> list[Artist]:
        """Return up to ``search_limit`` artists matching ``query``.

        Queries shorter than ``search_min_query_length`` after trimming
        return ``[]`` without touching Spotify.

        Raises:
            ConfigurationError: App credentials not configured
            RemoteApiError: Spotify rejected the search
            ExternalServiceError: Token endpoint or transport failure
        """
        term = (query or "").strip()
        if len(term) < self._settings.search_min_query_length:
            return []

        token = await self._token_provider.get_token()
        url = self._client.search_url(term, "artist", self._settings.search_limit)
        try:
            response = await self._client.request("GET", url, token)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Spotify search failed: {e}") from e

        if not response.is_success:
            if response.status_code == 401:
                # Cached app token was revoked early, the next search fetches a new one
                self._token_provider.invalidate()
            raise RemoteApiError(response.status_code, remote_error_message(response))

        body = decode_json(response)
        items = (body.get("artists") or {}).get("items") or []
        artists = [artist for artist in (to_artist(item) for item in items) if artist]
        logger.debug("Search %r returned %d artists", term, len(artists))
        return artists


class DebouncedArtistSearch:
    """Only the last search of a typing burst reaches Spotify.

    Every ``search()`` call waits ``delay`` seconds. If another call arrived
    in the meantime, the older one returns None without searching. A call
    that was overtaken while its request was in flight also returns None,
    so stale results never replace newer ones.
    """

    def __init__(
        self,
        search_service: ArtistSearchService,
        delay: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._search_service = search_service
        self._delay = delay
        self._sleep = sleep
        self._latest = 0

    async def search(self, query: str) -> list[Artist] | None:
        """Debounced ``search_artists``; None when superseded."""
        self._latest += 1
        ticket = self._latest
        await self._sleep(self._delay)
        if ticket != self._latest:
            return None
        artists = await self._search_service.search_artists(query)
        if ticket != self._latest:
            return None
        return artists


__all__ = ["ArtistSearchService", "DebouncedArtistSearch"]
