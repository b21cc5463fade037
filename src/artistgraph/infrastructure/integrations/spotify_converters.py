"""Convert Spotify Web API JSON into domain entities.

Hey future me - Spotify JSON is full of holes! Local files have artists
without ids, relinked tracks can lack a uri, images may have null
dimensions. Every converter here returns None instead of raising when the
entity can't be built, and callers skip those.
"""

from typing import Any

from artistgraph.domain.entities import Album, Artist, Image, Song, UserProfile


def to_image(data: dict[str, Any] | None) -> Image | None:
    """Convert one image object, None if it has no url."""
    if not data or not data.get("url"):
        return None
    return Image(url=data["url"], width=data.get("width"), height=data.get("height"))


def to_images(items: list[dict[str, Any]] | None) -> tuple[Image, ...]:
    """Convert an image list, keeping Spotify's largest-first order."""
    images = (to_image(item) for item in items or [])
    return tuple(image for image in images if image is not None)


def to_artist(data: dict[str, Any] | None) -> Artist | None:
    """Convert a full or simplified artist object.

    Simplified artists (inside tracks) carry no images or popularity.
    """
    if not data or not data.get("id"):
        return None
    return Artist(
        artist_id=data["id"],
        name=data.get("name") or "Unknown Artist",
        images=to_images(data.get("images")),
        popularity=data.get("popularity"),
    )


def to_album(data: dict[str, Any]) -> Album:
    """Convert an album object (only id, name and images are kept)."""
    return Album(
        album_id=data.get("id") or "",
        name=data.get("name") or "",
        images=to_images(data.get("images")),
    )


def to_song(data: dict[str, Any] | None, album: Album) -> Song | None:
    """Convert a (simplified) track object.

    Simplified tracks inside an album have no ``album`` key, so the parent
    album is passed in for context.

    Args:
        data: Track JSON from Spotify
        album: Parent album the track was listed under

    Returns:
        Song, or None when the track has no id or no identifiable artist
    """
    if not data or not data.get("id"):
        return None
    artists = tuple(
        artist
        for artist in (to_artist(item) for item in data.get("artists") or [])
        if artist is not None
    )
    if not artists:
        return None
    return Song(
        song_id=data["id"],
        name=data.get("name") or "",
        artists=artists,
        album=album,
        uri=data.get("uri") or "",
        popularity=data.get("popularity"),
    )


def to_user_profile(data: dict[str, Any]) -> UserProfile:
    """Convert the ``/me`` response."""
    return UserProfile(
        user_id=data.get("id") or "",
        display_name=data.get("display_name"),
        external_urls=dict(data.get("external_urls") or {}),
    )


__all__ = [
    "to_album",
    "to_artist",
    "to_image",
    "to_images",
    "to_song",
    "to_user_profile",
]
