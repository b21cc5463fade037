"""Interactive collaboration graph session.

Hey future me - this is the EFFECTFUL half of the graph engine. The pure half
(graph_state.reduce) knows nothing about fetching; this service owns:

- the current GraphState
- the in-flight guard (one fetch-and-fold at a time for adds)
- a generation counter so a slow fetch for an OLD seed can't overwrite the
  graph of a newer seed
- error bookkeeping (message, re-auth flag, missing-album notices)

Failures are RECORDED, not raised. Callers render ``snapshot()``.
Unexpected (non-domain) exceptions are recorded and rolled back the same
way, then re-raised. The guard is released either way.
"""

import logging
from dataclasses import dataclass

from artistgraph.application.services.artist_songs_service import ArtistSongsService
from artistgraph.config.settings import GraphSettings
from artistgraph.domain.entities import Artist, Song
from artistgraph.domain.exceptions import (
    AuthenticationError,
    DomainException,
    PartialDataUnavailable,
)
from artistgraph.domain.value_objects.graph_state import (
    ArtistAdded,
    ArtistRemoved,
    GraphEvent,
    GraphState,
    SeedSelected,
    SongsFetched,
    reduce,
    visible_songs,
)
from artistgraph.infrastructure.observability.logging import set_correlation_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphSnapshot:
    """Everything a view needs to render the graph.

    Attributes:
        state: Current graph
        is_fetching: A fetch-and-fold is in flight (add/remove are disabled)
        error: Message of the last failed fetch, None after a success
        requires_reauth: The last failure was an authentication failure
        missing: Releases Spotify returned as null during this graph's fetches
    """

    state: GraphState
    is_fetching: bool = False
    error: str | None = None
    requires_reauth: bool = False
    missing: tuple[PartialDataUnavailable, ...] = ()


class GraphSessionService:
    """Owns one user's graph and sequences fetches into it."""

    def __init__(
        self,
        songs_service: ArtistSongsService,
        settings: GraphSettings | None = None,
    ) -> None:
        self._songs_service = songs_service
        self._suggestion_limit = (settings or GraphSettings()).suggestion_limit
        self._state = GraphState()
        self._fetching = False
        self._error: str | None = None
        self._requires_reauth = False
        self._missing: list[PartialDataUnavailable] = []
        self._generation = 0

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def is_fetching(self) -> bool:
        return self._fetching

    def snapshot(self) -> GraphSnapshot:
        """Immutable view of the session."""
        return GraphSnapshot(
            state=self._state,
            is_fetching=self._fetching,
            error=self._error,
            requires_reauth=self._requires_reauth,
            missing=tuple(self._missing),
        )

    def visible_songs(self, only_collaborations: bool = False) -> list[Song]:
        """Songs sorted by popularity, optionally only multi-artist ones."""
        return visible_songs(self._state.songs, only_collaborations)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def set_seed(self, artist: Artist) -> None:
        """Start a fresh graph from ``artist`` and fetch its songs.

        Always allowed, even while another fetch runs. That fetch's result
        is discarded when it lands.
        """
        set_correlation_id()
        self._generation += 1
        generation = self._generation
        self._error = None
        self._requires_reauth = False
        self._missing = []
        self._dispatch(SeedSelected(artist))
        logger.info("Seed artist selected: %s (%s)", artist.name, artist.artist_id)

        # A failed seed keeps the seed-only graph, so there is nothing to restore
        await self._fetch_and_fold(artist, generation, restore=None)

    async def add_artist(self, artist: Artist) -> bool:
        """Add an artist (usually a suggestion) and fold in its songs.

        Returns:
            False if rejected (already graphed or a fetch is in flight)
        """
        if self._fetching:
            logger.info("Fetch in flight, ignoring add of %s", artist.name)
            return False
        if self._state.has_artist(artist.artist_id):
            logger.info("%s is already graphed", artist.name)
            return False

        set_correlation_id()
        before = self._state
        self._dispatch(ArtistAdded(artist))
        logger.info("Adding %s (%s) to the graph", artist.name, artist.artist_id)
        await self._fetch_and_fold(artist, self._generation, restore=before)
        return True

    def remove_artist(self, artist_id: str) -> bool:
        """Remove an artist and every song none of the remaining artists are on.

        Returns:
            False if rejected (a fetch is in flight) or the artist isn't graphed
        """
        if self._fetching:
            logger.info("Fetch in flight, ignoring removal of %s", artist_id)
            return False
        if not self._state.has_artist(artist_id):
            return False

        set_correlation_id()
        self._dispatch(ArtistRemoved(artist_id))
        if self._state.is_empty:
            self._generation += 1
            self._error = None
            self._requires_reauth = False
            self._missing = []
        logger.info(
            "Removed %s, %d artists and %d songs remain",
            artist_id,
            len(self._state.artists),
            len(self._state.songs),
        )
        return True

    def reset(self) -> None:
        """Drop the whole graph, e.g. when the user starts a new search.

        An in-flight fetch is orphaned and its result discarded.
        """
        self._generation += 1
        self._state = GraphState()
        self._fetching = False
        self._error = None
        self._requires_reauth = False
        self._missing = []

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _dispatch(self, event: GraphEvent) -> None:
        self._state = reduce(self._state, event, self._suggestion_limit)

    async def _fetch_and_fold(
        self, artist: Artist, generation: int, restore: GraphState | None
    ) -> None:
        self._fetching = True
        self._error = None
        try:
            result = await self._songs_service.fetch_artist_songs(
                artist.artist_id, artist.name
            )
        except DomainException as e:
            if generation != self._generation:
                logger.info("Discarding failure for stale fetch of %s", artist.name)
                return
            logger.warning("Fetching songs for %s failed: %s", artist.name, e.message)
            self._error = e.message
            self._requires_reauth = isinstance(e, AuthenticationError)
            if restore is not None:
                self._state = restore
        except Exception:
            # Same rollback as above, then propagate
            if generation == self._generation:
                logger.exception("Unexpected failure fetching songs for %s", artist.name)
                self._error = f"Unexpected error while fetching songs for {artist.name}"
                self._requires_reauth = False
                if restore is not None:
                    self._state = restore
            raise
        else:
            if generation != self._generation:
                logger.info("Discarding stale songs for %s", artist.name)
                return
            self._missing.extend(result.missing)
            self._dispatch(SongsFetched(tuple(result.songs)))
            logger.info(
                "Folded %d songs for %s, graph now has %d songs and %d suggestions",
                len(result.songs),
                artist.name,
                len(self._state.songs),
                len(self._state.suggestions),
            )
        finally:
            if generation == self._generation:
                self._fetching = False


__all__ = ["GraphSessionService", "GraphSnapshot"]
