"""External service integrations."""

from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient

__all__ = ["SpotifyClient"]
