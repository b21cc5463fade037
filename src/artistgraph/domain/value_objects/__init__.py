"""Value objects: release groups and the collaboration graph state."""

from artistgraph.domain.value_objects.graph_state import (
    ArtistAdded,
    ArtistRemoved,
    GraphEvent,
    GraphState,
    SeedSelected,
    SongsFetched,
    merge_songs,
    recompute_suggestions,
    reduce,
    song_dedup_key,
    visible_songs,
)
from artistgraph.domain.value_objects.release_groups import (
    ALL_RELEASE_GROUPS,
    ReleaseGroup,
    include_groups_param,
)

__all__ = [
    "ALL_RELEASE_GROUPS",
    "ArtistAdded",
    "ArtistRemoved",
    "GraphEvent",
    "GraphState",
    "ReleaseGroup",
    "SeedSelected",
    "SongsFetched",
    "include_groups_param",
    "merge_songs",
    "recompute_suggestions",
    "reduce",
    "song_dedup_key",
    "visible_songs",
]
