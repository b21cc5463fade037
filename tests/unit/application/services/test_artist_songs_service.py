"""Tests for the song aggregator."""

from typing import Any

import pytest

from artistgraph.application.services.artist_songs_service import (
    ArtistSongsService,
    chunked,
)
from artistgraph.config.settings import GraphSettings
from artistgraph.domain.exceptions import AuthExpired, PartialDataUnavailable
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient

TRACKS_PAGE_2 = "https://api.spotify.com/v1/albums/al1/tracks?offset=50&limit=50"
ALBUMS_PAGE_2 = "https://api.spotify.com/v1/artists/radiohead/albums?offset=50&limit=50"


def track(track_id: str | None, name: str, *artists: tuple[str | None, str]) -> dict[str, Any]:
    return {
        "id": track_id,
        "name": name,
        "uri": f"spotify:track:{track_id}" if track_id else None,
        "artists": [{"id": artist_id, "name": artist_name} for artist_id, artist_name in artists],
    }


RADIOHEAD = ("radiohead", "Radiohead")
THOM = ("thom", "Thom Yorke")
BURIAL = ("burial", "Burial")


def album(album_id: str, name: str, tracks: list[dict[str, Any]], next_url: str | None = None) -> dict[str, Any]:
    return {
        "id": album_id,
        "name": name,
        "images": [
            {"url": f"https://i.scdn.co/{album_id}-640", "width": 640, "height": 640},
            {"url": f"https://i.scdn.co/{album_id}-64", "width": 64, "height": 64},
        ],
        "tracks": {"items": tracks, "next": next_url},
    }


@pytest.fixture
def service(spotify_client: SpotifyClient, fake_caller) -> ArtistSongsService:
    """Aggregator wired to the fake caller."""
    return ArtistSongsService(spotify_client, fake_caller, GraphSettings())


class TestFetchArtistSongs:
    """Tests for fetch_artist_songs."""

    async def test_full_discography_walk(
        self, service: ArtistSongsService, spotify_client: SpotifyClient, fake_caller
    ) -> None:
        """Test paging, null albums, nested track paging, and id dedup together."""
        albums_url = spotify_client.artist_albums_url("radiohead")
        fake_caller.responses = {
            albums_url: {"items": [{"id": "al1"}, {"id": "al2"}], "next": ALBUMS_PAGE_2},
            ALBUMS_PAGE_2: {"items": [{"id": "al3"}], "next": None},
            spotify_client.albums_url(["al1", "al2", "al3"]): {
                "albums": [
                    album(
                        "al1",
                        "In Rainbows",
                        [track("t1", "Reckoner", RADIOHEAD)],
                        next_url=TRACKS_PAGE_2,
                    ),
                    None,
                    album(
                        "al3",
                        "Features",
                        [
                            track("t1", "Reckoner", RADIOHEAD),
                            track("t3", "Ego", RADIOHEAD, BURIAL),
                        ],
                    ),
                ]
            },
            TRACKS_PAGE_2: {"items": [track("t2", "Daydreaming", RADIOHEAD, THOM)], "next": None},
        }

        result = await service.fetch_artist_songs("radiohead", "Radiohead")

        assert [song.song_id for song in result.songs] == ["t1", "t2", "t3"]
        assert result.songs[0].album.name == "In Rainbows"
        assert result.songs[0].album.smallest_image.url == "https://i.scdn.co/al1-64"
        assert result.songs[1].artist_ids == frozenset({"radiohead", "thom"})
        assert len(result.missing) == 1
        assert isinstance(result.missing[0], PartialDataUnavailable)
        assert result.missing[0].resource_id == "al2"

    async def test_album_ids_are_batched_by_twenty(
        self, service: ArtistSongsService, spotify_client: SpotifyClient, fake_caller
    ) -> None:
        """Test 45 releases take three detail requests of 20, 20 and 5 ids."""
        album_ids = [f"al{i}" for i in range(45)]
        albums_url = spotify_client.artist_albums_url("radiohead")
        fake_caller.responses = {
            albums_url: {"items": [{"id": album_id} for album_id in album_ids], "next": None},
        }
        for batch in chunked(album_ids, 20):
            fake_caller.responses[spotify_client.albums_url(batch)] = {"albums": []}

        await service.fetch_artist_songs("radiohead", "Radiohead")

        detail_requests = fake_caller.requested[1:]
        assert len(detail_requests) == 3
        assert detail_requests[2] == spotify_client.albums_url(album_ids[40:])

    async def test_no_releases_skips_detail_requests(
        self, service: ArtistSongsService, spotify_client: SpotifyClient, fake_caller
    ) -> None:
        """Test an artist without releases returns empty without more requests."""
        albums_url = spotify_client.artist_albums_url("nobody")
        fake_caller.responses = {albums_url: {"items": [], "next": None}}

        result = await service.fetch_artist_songs("nobody", "Nobody")

        assert result.songs == []
        assert fake_caller.requested == [albums_url]

    async def test_albums_without_tracks_and_broken_tracks_are_skipped(
        self, service: ArtistSongsService, spotify_client: SpotifyClient, fake_caller
    ) -> None:
        """Test albums without a listing and tracks without id/artists are dropped."""
        albums_url = spotify_client.artist_albums_url("radiohead")
        no_tracks = {"id": "al2", "name": "Empty", "images": []}
        fake_caller.responses = {
            albums_url: {"items": [{"id": "al1"}, {"id": "al2"}], "next": None},
            spotify_client.albums_url(["al1", "al2"]): {
                "albums": [
                    album(
                        "al1",
                        "Mixed",
                        [
                            track(None, "Local file", RADIOHEAD),
                            track("t-no-artist", "Orphan", (None, "Local Artist")),
                            track("t1", "Creep", RADIOHEAD),
                        ],
                    ),
                    no_tracks,
                ]
            },
        }

        result = await service.fetch_artist_songs("radiohead", "Radiohead")

        assert [song.song_id for song in result.songs] == ["t1"]
        assert result.missing == []

    async def test_failure_propagates_without_partial_result(
        self, service: ArtistSongsService, spotify_client: SpotifyClient, fake_caller
    ) -> None:
        """Test an auth failure mid-walk aborts the whole fetch."""
        albums_url = spotify_client.artist_albums_url("radiohead")
        fake_caller.responses = {
            albums_url: {"items": [{"id": "al1"}], "next": None},
            spotify_client.albums_url(["al1"]): AuthExpired(),
        }

        with pytest.raises(AuthExpired):
            await service.fetch_artist_songs("radiohead", "Radiohead")


def test_chunked() -> None:
    """Test chunking keeps order and the remainder."""
    assert chunked(["a", "b", "c", "d", "e"], 2) == [["a", "b"], ["c", "d"], ["e"]]
    assert chunked([], 20) == []
