"""Release groups accepted by Spotify's artist-albums endpoint.

Hey future me - Spotify files an artist's releases under four ``include_groups``:

- album: studio albums
- single: singles AND EPs (Spotify doesn't separate these)
- compilation: greatest hits, box sets
- appears_on: releases OWNED by someone else that the artist is featured on

Collaborations mostly live under ``appears_on``! An album-only fetch misses
every feature the artist did on other people's records, which is exactly the
data the collaboration graph needs. So we ALWAYS request all four groups.
"""

from enum import Enum


class ReleaseGroup(str, Enum):
    """One ``include_groups`` value of the artist-albums endpoint."""

    ALBUM = "album"
    SINGLE = "single"
    COMPILATION = "compilation"
    APPEARS_ON = "appears_on"

    def __str__(self) -> str:
        return self.value


# Order matches what the artist-albums endpoint returns first
ALL_RELEASE_GROUPS: tuple[ReleaseGroup, ...] = (
    ReleaseGroup.ALBUM,
    ReleaseGroup.SINGLE,
    ReleaseGroup.APPEARS_ON,
    ReleaseGroup.COMPILATION,
)


def include_groups_param(
    groups: tuple[ReleaseGroup, ...] = ALL_RELEASE_GROUPS,
) -> str:
    """Build the comma-separated ``include_groups`` query value."""
    return ",".join(group.value for group in groups)
