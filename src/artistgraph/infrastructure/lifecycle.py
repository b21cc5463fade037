"""Application lifecycle: build the service graph at startup, close it at shutdown.

Everything before ``yield`` in ``lifespan`` runs at STARTUP, everything after
at SHUTDOWN. The try/finally makes sure the shared httpx client is closed
even if the caller blows up in between.

USAGE:
    async with lifespan(token_store=TokenManager(access, refresh, 3600)) as services:
        await services.graph.set_seed(artist)
        result = await services.playlists.export(
            services.graph.visible_songs(), artist.name
        )
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from artistgraph.application.services.artist_search_service import (
    ArtistSearchService,
    DebouncedArtistSearch,
)
from artistgraph.application.services.artist_songs_service import ArtistSongsService
from artistgraph.application.services.credential_refresh import AuthenticatedCaller
from artistgraph.application.services.graph_session_service import GraphSessionService
from artistgraph.application.services.playlist_service import PlaylistExportService
from artistgraph.application.services.sessions import (
    ClientCredentialsProvider,
    TokenManager,
)
from artistgraph.config import Settings, get_settings
from artistgraph.domain.exceptions import ConfigurationError
from artistgraph.domain.ports import ITokenStore
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient
from artistgraph.infrastructure.observability import configure_logging

logger = logging.getLogger(__name__)


@dataclass
class ArtistGraphServices:
    """Wired services sharing one SpotifyClient (and so one rate limiter)."""

    settings: Settings
    client: SpotifyClient
    token_store: ITokenStore
    caller: AuthenticatedCaller
    songs: ArtistSongsService
    graph: GraphSessionService
    playlists: PlaylistExportService
    search: ArtistSearchService
    debounced_search: DebouncedArtistSearch

    async def close(self) -> None:
        await self.client.close()


def create_services(
    settings: Settings, token_store: ITokenStore | None = None
) -> ArtistGraphServices:
    """Wire all services for one user session.

    Args:
        settings: Application settings
        token_store: User token storage, an empty TokenManager if None

    Returns:
        ArtistGraphServices (call ``close()`` when done)
    """
    client = SpotifyClient(settings.spotify)
    store = token_store if token_store is not None else TokenManager()
    caller = AuthenticatedCaller(client, store)
    songs = ArtistSongsService(client, caller, settings.graph)
    search = ArtistSearchService(
        client, ClientCredentialsProvider(client), settings.graph
    )
    return ArtistGraphServices(
        settings=settings,
        client=client,
        token_store=store,
        caller=caller,
        songs=songs,
        graph=GraphSessionService(songs, settings.graph),
        playlists=PlaylistExportService(client, caller, settings.graph),
        search=search,
        debounced_search=DebouncedArtistSearch(
            search, delay=settings.graph.search_debounce_seconds
        ),
    )


@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    token_store: ITokenStore | None = None,
    setup_logging: bool = True,
) -> AsyncGenerator[ArtistGraphServices, None]:
    """Configure logging, validate config, and yield wired services.

    Raises:
        ConfigurationError: SPOTIFY_CLIENT_ID is missing (token refresh
            can't work without it)
    """
    settings = settings or get_settings()

    if setup_logging:
        configure_logging(
            log_level=settings.log_level,
            json_format=settings.log_json,
            app_name=settings.app_name,
        )

    if not settings.spotify.is_configured:
        raise ConfigurationError(
            "SPOTIFY_CLIENT_ID is not configured. Set it in your environment or "
            ".env file. Get credentials at https://developer.spotify.com/dashboard"
        )

    logger.info("Starting %s", settings.app_name)
    services = create_services(settings, token_store)
    try:
        yield services
    finally:
        await services.close()
        logger.info("Shut down %s", settings.app_name)


__all__ = ["ArtistGraphServices", "create_services", "lifespan"]
