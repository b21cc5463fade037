"""Shared fixtures for application service tests."""

from collections.abc import AsyncIterator
from typing import Any

import pytest

from artistgraph.config.settings import GraphSettings, SpotifySettings
from artistgraph.infrastructure.integrations.spotify_client import SpotifyClient


class FakeCaller:
    """Stands in for AuthenticatedCaller, serving canned JSON by URL.

    A value that is an exception instance is raised instead of returned.
    Every request is recorded so tests can assert on order and batching.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.requested: list[str] = []
        self.sent: list[tuple[str, str, Any]] = []

    def _answer(self, url: str) -> Any:
        if url not in self.responses:
            raise AssertionError(f"Unexpected request: {url}")
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        self.requested.append(url)
        return self._answer(url)

    async def send_json(self, method: str, url: str, body: Any) -> Any:
        self.sent.append((method, url, body))
        return self._answer(url)


@pytest.fixture
def spotify_settings() -> SpotifySettings:
    """Spotify settings with test credentials."""
    return SpotifySettings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        market="from_token",
    )


@pytest.fixture
def graph_settings() -> GraphSettings:
    """Graph settings with the default batch sizes."""
    return GraphSettings()


@pytest.fixture
async def spotify_client(spotify_settings: SpotifySettings) -> AsyncIterator[SpotifyClient]:
    """Spotify client that is closed after the test."""
    client = SpotifyClient(spotify_settings)
    yield client
    await client.close()


@pytest.fixture
def fake_caller() -> FakeCaller:
    """Empty fake caller, tests fill ``responses``."""
    return FakeCaller()
