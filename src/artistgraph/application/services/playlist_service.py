"""Export the visible songs as a private Spotify playlist.

Hey future me - three steps, each through the AuthenticatedCaller so every
one of them gets its own refresh-once:

1. GET /me                      -> user id
2. POST /users/{id}/playlists   -> new private playlist
3. POST /playlists/{id}/tracks  -> URIs, 100 per request (Spotify's cap)

If step 3 fails halfway the playlist exists with the first batches in it.
We don't try to clean that up.
"""

import logging
from dataclasses import dataclass

from artistgraph.application.services.artist_songs_service import chunked
from artistgraph.application.services.credential_refresh import AuthenticatedCaller
from artistgraph.config.settings import GraphSettings
from artistgraph.domain.entities import Song
from artistgraph.domain.exceptions import (
    NoValidTracks,
    PermissionDenied,
    RemoteApiError,
    ValidationError,
)
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient
from artistgraph.infrastructure.integrations.spotify_converters import to_user_profile
from artistgraph.infrastructure.observability.logging import (
    log_operation,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

TRACK_URI_PREFIX = "spotify:track:"


@dataclass(frozen=True)
class PlaylistExportResult:
    """Outcome of an export.

    Attributes:
        playlist_id: Id of the created playlist
        url: Open-in-Spotify link, None if Spotify didn't return one
        track_count: URIs sent to the playlist
        skipped: Songs left out for a missing or non-track URI
    """

    playlist_id: str
    url: str | None
    track_count: int
    skipped: int


def playlist_name(seed_artist_name: str) -> str:
    return f"Artist Graph: {seed_artist_name} & Connections"


def playlist_description(seed_artist_name: str) -> str:
    return (
        f"Songs featuring {seed_artist_name} and their collaborators "
        "discovered via Artist Graph."
    )


def collect_track_uris(songs: list[Song]) -> tuple[list[str], int]:
    """Playable track URIs in song order plus the number of songs skipped."""
    uris = [song.uri for song in songs if song.uri.startswith(TRACK_URI_PREFIX)]
    return uris, len(songs) - len(uris)


class PlaylistExportService:
    """Creates a playlist from a list of songs."""

    def __init__(
        self,
        client: SpotifyClient,
        caller: AuthenticatedCaller,
        settings: GraphSettings | None = None,
    ) -> None:
        self._client = client
        self._caller = caller
        self._batch_size = (settings or GraphSettings()).playlist_batch_size

    async def export(
        self, songs: list[Song], seed_artist_name: str
    ) -> PlaylistExportResult:
        """Create a private playlist holding ``songs``.

        Args:
            songs: Songs to export, usually the currently visible list
            seed_artist_name: Name of the graph's seed, used in the title

        Returns:
            PlaylistExportResult

        Raises:
            ValidationError: No seed artist name given
            NoValidTracks: None of the songs has a playable track URI
            AuthRequired, AuthExpired: Session can't be (re)authenticated
            PermissionDenied: Spotify answered 403 (missing playlist scope)
            RemoteApiError: Any other Spotify failure
        """
        if not seed_artist_name or not seed_artist_name.strip():
            raise ValidationError("Please select a seed artist first.")

        uris, skipped = collect_track_uris(songs)
        if skipped:
            logger.warning("%d songs have no track URI and were excluded", skipped)
        if not uris:
            raise NoValidTracks()

        set_correlation_id()
        async with log_operation(
            logger, "playlist.export", seed=seed_artist_name, tracks=len(uris)
        ):
            try:
                return await self._create_and_fill(uris, skipped, seed_artist_name)
            except PermissionDenied:
                raise
            except RemoteApiError as e:
                if e.is_permission_denied:
                    raise PermissionDenied(e.remote_message) from e
                raise

    async def _create_and_fill(
        self, uris: list[str], skipped: int, seed_artist_name: str
    ) -> PlaylistExportResult:
        me = await self._caller.get_json(self._client.current_user_url())
        profile = to_user_profile(me)
        if not profile.user_id:
            raise RemoteApiError(502, "Current user profile carried no id")

        playlist = await self._caller.send_json(
            "POST",
            self._client.create_playlist_url(profile.user_id),
            {
                "name": playlist_name(seed_artist_name),
                "description": playlist_description(seed_artist_name),
                "public": False,
                "collaborative": False,
            },
        )
        playlist_id = playlist["id"]
        url = (playlist.get("external_urls") or {}).get("spotify")
        logger.info("Created playlist %s for user %s", playlist_id, profile.user_id)

        tracks_url = self._client.playlist_tracks_url(playlist_id)
        for batch in chunked(uris, self._batch_size):
            await self._caller.send_json("POST", tracks_url, {"uris": batch})
            logger.debug("Added %d tracks to playlist %s", len(batch), playlist_id)

        return PlaylistExportResult(
            playlist_id=playlist_id,
            url=url,
            track_count=len(uris),
            skipped=skipped,
        )


__all__ = [
    "PlaylistExportResult",
    "PlaylistExportService",
    "collect_track_uris",
    "playlist_description",
    "playlist_name",
]
