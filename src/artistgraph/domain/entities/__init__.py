"""Domain entities for the collaboration graph.

Hey future me - everything here is a FROZEN dataclass! Artists and songs come
from Spotify and are never mutated afterwards, only added to or removed from
the graph. Collections are tuples so the objects stay hashable.
"""

from dataclasses import dataclass, field

from artistgraph.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Image:
    """Remote image reference with optional pixel dimensions."""

    url: str
    width: int | None = None
    height: int | None = None

    @property
    def area(self) -> int | None:
        """Pixel area, or None when Spotify didn't report dimensions."""
        if self.width is None or self.height is None:
            return None
        return self.width * self.height


def smallest_image(images: tuple[Image, ...]) -> Image | None:
    """Pick the smallest image of a set.

    Spotify lists images largest first, so when dimensions are missing the
    last entry is the smallest one.

    Args:
        images: Images in remote order

    Returns:
        Smallest image, or None for an empty tuple
    """
    if not images:
        return None
    if all(image.area is not None for image in images):
        # min() keeps the first of equal areas
        return min(images, key=lambda image: image.area or 0)
    return images[-1]


@dataclass(frozen=True)
class Artist:
    """A Spotify artist.

    Only ``artist_id`` takes part in equality checks that matter to the graph;
    the graph always compares ids, never whole objects.
    """

    artist_id: str
    name: str
    images: tuple[Image, ...] = ()
    popularity: int | None = None

    def __post_init__(self) -> None:
        """Validate essential fields."""
        if not self.artist_id:
            raise ValidationError("Artist id cannot be empty")

    @property
    def smallest_image(self) -> Image | None:
        """Thumbnail used for list rows."""
        return smallest_image(self.images)


@dataclass(frozen=True)
class Album:
    """A release container (album, single, compilation, or appearance)."""

    album_id: str
    name: str
    images: tuple[Image, ...] = ()

    @property
    def smallest_image(self) -> Image | None:
        """Smallest cover image."""
        return smallest_image(self.images)


@dataclass(frozen=True)
class Song:
    """A track with its contributing artists and parent album.

    Attributes:
        song_id: Spotify track id (unique per release, NOT per recording!)
        name: Track title
        artists: Contributing artists in credit order (never empty)
        album: Parent container the track was fetched from
        uri: Playable URI like "spotify:track:xxx" (empty if unavailable)
        popularity: Spotify 0-100 score, None for simplified album tracks
    """

    song_id: str
    name: str
    artists: tuple[Artist, ...]
    album: Album
    uri: str = ""
    popularity: int | None = None

    def __post_init__(self) -> None:
        """Validate essential fields."""
        if not self.artists:
            raise ValidationError(f"Song {self.song_id} has no contributing artists")

    @property
    def artist_ids(self) -> frozenset[str]:
        """Ids of all contributing artists."""
        return frozenset(artist.artist_id for artist in self.artists)

    @property
    def is_collaboration(self) -> bool:
        """True when more than one artist is credited."""
        return len(self.artists) > 1


@dataclass(frozen=True)
class Suggestion:
    """A non-graphed artist ranked by how many graphed songs it appears on."""

    artist: Artist
    count: int
    image: Image | None = None


@dataclass(frozen=True)
class UserProfile:
    """The authenticated Spotify user."""

    user_id: str
    display_name: str | None = None
    external_urls: dict[str, str] = field(default_factory=dict, hash=False)


__all__ = [
    "Album",
    "Artist",
    "Image",
    "Song",
    "Suggestion",
    "UserProfile",
    "smallest_image",
]
