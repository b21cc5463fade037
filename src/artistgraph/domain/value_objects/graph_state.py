"""Collaboration graph state and its pure state transitions.

Hey future me - this module is deliberately free of I/O! The graph is a plain
immutable value and every mutation goes through ``reduce(state, event)``.
The fetching (and the in-flight guard) lives in GraphSessionService, which
dispatches events into here. That split makes the fold/recompute logic
testable without HTTP mocks.

Transitions:
    SeedSelected(artist)   -> fresh graph with only ``artist``, no songs
    ArtistAdded(artist)    -> append (no-op if already graphed)
    ArtistRemoved(id)      -> drop artist + songs no remaining artist is on
    SongsFetched(songs)    -> fold songs in with the name+artists dedup key

Every transition recomputes suggestions from scratch. Nothing derived is
ever patched incrementally.
"""

from dataclasses import dataclass, replace

from artistgraph.domain.entities import Artist, Image, Song, Suggestion

DEFAULT_SUGGESTION_LIMIT = 10

SongKey = tuple[str, tuple[str, ...]]


@dataclass(frozen=True)
class GraphState:
    """Snapshot of the collaboration graph.

    Attributes:
        artists: Graphed artists in insertion order, the first one is the seed
        songs: Deduplicated songs accumulated from all graphed artists' fetches
        suggestions: Top-ranked non-graphed collaborators
        potential_collaborations: Number of ALL non-graphed collaborators found
        query: Active search query (cleared on full reset)
    """

    artists: tuple[Artist, ...] = ()
    songs: tuple[Song, ...] = ()
    suggestions: tuple[Suggestion, ...] = ()
    potential_collaborations: int = 0
    query: str = ""

    @property
    def seed(self) -> Artist | None:
        """The first artist added to the graph."""
        return self.artists[0] if self.artists else None

    @property
    def artist_ids(self) -> frozenset[str]:
        """Ids of all graphed artists."""
        return frozenset(artist.artist_id for artist in self.artists)

    @property
    def is_empty(self) -> bool:
        """True when no artist is graphed."""
        return not self.artists

    def has_artist(self, artist_id: str) -> bool:
        """Check if an artist is graphed."""
        return any(artist.artist_id == artist_id for artist in self.artists)


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class SeedSelected:
    """A new seed artist replaces the whole graph."""

    artist: Artist


@dataclass(frozen=True)
class ArtistAdded:
    """A (suggested) artist joins the graph."""

    artist: Artist


@dataclass(frozen=True)
class ArtistRemoved:
    """An artist leaves the graph."""

    artist_id: str


@dataclass(frozen=True)
class SongsFetched:
    """Songs fetched for one artist are ready to be folded in."""

    songs: tuple[Song, ...]


GraphEvent = SeedSelected | ArtistAdded | ArtistRemoved | SongsFetched


# =============================================================================
# Song helpers
# =============================================================================


def song_dedup_key(song: Song) -> SongKey:
    """Key that identifies one recording across releases.

    Hey future me - we can NOT use the Spotify track id here! The same
    recording has a different id on the album, the single, and every
    compilation it appears on. Title + sorted artist names catches those.
    Known tradeoff: two different recordings (e.g. a re-recording) with the
    same title and credits collapse into one. That's accepted behaviour.
    """
    return song.name, tuple(sorted(artist.name for artist in song.artists))


def merge_songs(
    existing: tuple[Song, ...], incoming: tuple[Song, ...] | list[Song]
) -> tuple[Song, ...]:
    """Union two song collections, first-seen wins per dedup key.

    Args:
        existing: Songs already in the graph (kept in front)
        incoming: Newly fetched songs

    Returns:
        Deduplicated songs in first-seen order
    """
    unique: dict[SongKey, Song] = {}
    for song in (*existing, *incoming):
        unique.setdefault(song_dedup_key(song), song)
    return tuple(unique.values())


def songs_for_artists(
    songs: tuple[Song, ...], artist_ids: frozenset[str]
) -> tuple[Song, ...]:
    """Keep only songs with at least one contributing artist in ``artist_ids``."""
    return tuple(song for song in songs if song.artist_ids & artist_ids)


def visible_songs(
    songs: tuple[Song, ...] | list[Song], only_collaborations: bool = False
) -> list[Song]:
    """Songs as the list view shows them.

    Filters to multi-artist songs if requested and sorts by popularity
    (descending). Songs without popularity sort as 0; ties keep their order.
    """
    selected = [
        song for song in songs if not only_collaborations or song.is_collaboration
    ]
    return sorted(selected, key=lambda song: song.popularity or 0, reverse=True)


# =============================================================================
# Suggestions
# =============================================================================


@dataclass
class _CandidateTally:
    """Mutable counter used while ranking collaborators."""

    artist: Artist
    count: int
    image: Image | None


def recompute_suggestions(
    artists: tuple[Artist, ...],
    songs: tuple[Song, ...],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> tuple[tuple[Suggestion, ...], int]:
    """Rank non-graphed artists by how many graphed songs they appear on.

    A song counts when at least one graphed artist is on it. Every other
    artist on that song is a candidate. The representative image is the
    smallest cover of the first song a candidate was seen on.

    Args:
        artists: Graphed artists
        songs: Accumulated songs
        limit: How many suggestions to expose

    Returns:
        Tuple of (top ``limit`` suggestions, total candidate count)
    """
    graphed_ids = frozenset(artist.artist_id for artist in artists)
    if not graphed_ids:
        return (), 0

    tallies: dict[str, _CandidateTally] = {}
    for song in songs:
        if not song.artist_ids & graphed_ids:
            continue
        counted_on_song: set[str] = set()
        for artist in song.artists:
            if artist.artist_id in graphed_ids or artist.artist_id in counted_on_song:
                continue
            counted_on_song.add(artist.artist_id)
            tally = tallies.get(artist.artist_id)
            if tally is None:
                image = song.album.smallest_image
                candidate = replace(artist, images=(image,) if image else ())
                tally = _CandidateTally(artist=candidate, count=0, image=image)
                tallies[artist.artist_id] = tally
            tally.count += 1

    # sorted() is stable, so ties stay in first-encountered order
    ranked = sorted(tallies.values(), key=lambda tally: tally.count, reverse=True)
    suggestions = tuple(
        Suggestion(artist=tally.artist, count=tally.count, image=tally.image)
        for tally in ranked[:limit]
    )
    return suggestions, len(ranked)


def _with_suggestions(state: GraphState, limit: int) -> GraphState:
    suggestions, potential = recompute_suggestions(state.artists, state.songs, limit)
    return replace(state, suggestions=suggestions, potential_collaborations=potential)


# =============================================================================
# Reducer
# =============================================================================


def reduce(
    state: GraphState,
    event: GraphEvent,
    suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> GraphState:
    """Apply one event to the graph.

    Args:
        state: Current graph
        event: What happened
        suggestion_limit: How many suggestions to expose

    Returns:
        The new graph (``state`` itself when the event is a no-op)

    Raises:
        TypeError: For unknown event types
    """
    if isinstance(event, SeedSelected):
        return GraphState(artists=(event.artist,), query=event.artist.name)

    if isinstance(event, ArtistAdded):
        if state.has_artist(event.artist.artist_id):
            return state
        added = replace(state, artists=(*state.artists, event.artist))
        return _with_suggestions(added, suggestion_limit)

    if isinstance(event, ArtistRemoved):
        if not state.has_artist(event.artist_id):
            return state
        remaining = tuple(a for a in state.artists if a.artist_id != event.artist_id)
        if not remaining:
            # Last artist gone - full reset, including the search query
            return GraphState()
        remaining_ids = frozenset(artist.artist_id for artist in remaining)
        shrunk = replace(
            state,
            artists=remaining,
            songs=songs_for_artists(state.songs, remaining_ids),
        )
        return _with_suggestions(shrunk, suggestion_limit)

    if isinstance(event, SongsFetched):
        folded = replace(state, songs=merge_songs(state.songs, event.songs))
        return _with_suggestions(folded, suggestion_limit)

    raise TypeError(f"Unknown graph event: {type(event).__name__}")


__all__ = [
    "ArtistAdded",
    "ArtistRemoved",
    "DEFAULT_SUGGESTION_LIMIT",
    "GraphEvent",
    "GraphState",
    "SeedSelected",
    "SongsFetched",
    "merge_songs",
    "recompute_suggestions",
    "reduce",
    "song_dedup_key",
    "songs_for_artists",
    "visible_songs",
]
