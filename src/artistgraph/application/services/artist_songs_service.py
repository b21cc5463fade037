"""Fetch every song an artist appears on.

Hey future me - the "top tracks" endpoint is useless for a collaboration
graph (10 songs, mostly the artist's own). Instead we walk the FULL release
list, including ``appears_on``, and pull every track of every release:

1. Paginate /artists/{id}/albums over all four release groups (50 per page)
2. Bulk-fetch album details in batches of 20 ids (Spotify's hard cap)
3. Per album: exhaust the nested ``tracks`` listing (big box sets page!)
4. Flatten, attach album name/images, dedup by track id (first wins)

Everything is sequential. One big discography is ~10-30 requests, which
the token bucket paces comfortably.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from artistgraph.application.services.credential_refresh import AuthenticatedCaller
from artistgraph.application.services.pagination import exhaust_page, fetch_all_pages
from artistgraph.config.settings import GraphSettings
from artistgraph.domain.entities import Song
from artistgraph.domain.exceptions import PartialDataUnavailable
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient
from artistgraph.infrastructure.integrations.spotify_converters import to_album, to_song
from artistgraph.infrastructure.observability.logging import log_operation

logger = logging.getLogger(__name__)


@dataclass
class ArtistSongs:
    """Songs of one artist plus notices for releases Spotify couldn't return.

    Attributes:
        songs: Unique songs (by track id) in discovery order
        missing: One entry per ``null`` album in the bulk responses
    """

    songs: list[Song] = field(default_factory=list)
    missing: list[PartialDataUnavailable] = field(default_factory=list)


def chunked(values: list[str], size: int) -> list[list[str]]:
    """Split ``values`` into consecutive chunks of at most ``size``."""
    return [values[i : i + size] for i in range(0, len(values), size)]


class ArtistSongsService:
    """Builds the deduplicated song list for one artist."""

    def __init__(
        self,
        client: SpotifyClient,
        caller: AuthenticatedCaller,
        settings: GraphSettings | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            client: Used for URL building only, requests go through ``caller``
            caller: Authenticated caller (refresh-once semantics)
            settings: Batch and page sizes
        """
        self._client = client
        self._caller = caller
        self._settings = settings or GraphSettings()

    async def fetch_artist_songs(self, artist_id: str, artist_name: str = "") -> ArtistSongs:
        """Fetch all unique songs of an artist.

        Args:
            artist_id: Spotify artist id
            artist_name: Display name, only used for logging

        Returns:
            ArtistSongs with songs and missing-album notices

        Raises:
            AuthenticationError: Session can't be (re)authenticated
            RemoteApiError: Spotify failed on any request, nothing partial is
                returned
        """
        async with log_operation(
            logger, "artist_songs.fetch", artist_id=artist_id, artist_name=artist_name
        ):
            album_ids = await self._fetch_album_ids(artist_id)
            result = ArtistSongs()
            if not album_ids:
                return result

            seen_ids: set[str] = set()
            for batch in chunked(album_ids, self._settings.album_batch_size):
                for song in await self._fetch_batch_songs(batch, result.missing):
                    if song.song_id in seen_ids:
                        continue
                    seen_ids.add(song.song_id)
                    result.songs.append(song)

            logger.info(
                "Found %d unique songs across %d releases for %s",
                len(result.songs),
                len(album_ids),
                artist_name or artist_id,
            )
            return result

    async def _fetch_album_ids(self, artist_id: str) -> list[str]:
        url = self._client.artist_albums_url(
            artist_id, limit=self._settings.albums_page_limit
        )
        items = await fetch_all_pages(self._caller, url)
        # dict.fromkeys keeps first-seen order while dropping repeats
        return list(dict.fromkeys(item["id"] for item in items if item and item.get("id")))

    async def _fetch_batch_songs(
        self, batch: list[str], missing: list[PartialDataUnavailable]
    ) -> list[Song]:
        body = await self._caller.get_json(self._client.albums_url(batch))
        songs: list[Song] = []
        for index, album_data in enumerate(body.get("albums") or []):
            if album_data is None:
                album_id = batch[index] if index < len(batch) else "unknown"
                logger.warning("Album %s came back null, skipping it", album_id)
                missing.append(PartialDataUnavailable("Album", album_id))
                continue
            songs.extend(await self._album_songs(album_data))
        return songs

    async def _album_songs(self, album_data: dict[str, Any]) -> list[Song]:
        tracks_page = album_data.get("tracks")
        if not tracks_page or tracks_page.get("items") is None:
            return []
        album = to_album(album_data)
        tracks = await exhaust_page(self._caller, tracks_page)
        songs = (to_song(track, album) for track in tracks)
        return [song for song in songs if song is not None]


__all__ = ["ArtistSongs", "ArtistSongsService", "chunked"]
