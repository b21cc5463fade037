"""Application services."""

from artistgraph.application.services.artist_search_service import (
    ArtistSearchService,
    DebouncedArtistSearch,
)
from artistgraph.application.services.artist_songs_service import (
    ArtistSongs,
    ArtistSongsService,
)
from artistgraph.application.services.credential_refresh import AuthenticatedCaller
from artistgraph.application.services.graph_session_service import (
    GraphSessionService,
    GraphSnapshot,
)
from artistgraph.application.services.pagination import exhaust_page, fetch_all_pages
from artistgraph.application.services.playlist_service import (
    PlaylistExportResult,
    PlaylistExportService,
)

__all__ = [
    "ArtistSearchService",
    "ArtistSongs",
    "ArtistSongsService",
    "AuthenticatedCaller",
    "DebouncedArtistSearch",
    "GraphSessionService",
    "GraphSnapshot",
    "PlaylistExportResult",
    "PlaylistExportService",
    "exhaust_page",
    "fetch_all_pages",
]
