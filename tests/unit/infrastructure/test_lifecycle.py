"""Tests for service wiring and the lifespan context."""

import pytest

from artistgraph.application.services.sessions import TokenManager
from artistgraph.config import GraphSettings, Settings, SpotifySettings
from artistgraph.domain.exceptions import ConfigurationError
from artistgraph.infrastructure.lifecycle import create_services, lifespan


def make_settings(client_id: str = "test-client-id") -> Settings:
    return Settings(
        spotify=SpotifySettings(client_id=client_id, _env_file=None),
        graph=GraphSettings(search_debounce_seconds=0.2, _env_file=None),
        _env_file=None,
    )


class TestCreateServices:
    """Tests for create_services."""

    async def test_services_share_one_client(self) -> None:
        store = TokenManager(access_token="a", refresh_token="r")
        services = create_services(make_settings(), store)
        try:
            assert services.token_store is store
            assert services.caller._client is services.client
            assert services.songs._client is services.client
            assert services.debounced_search._delay == 0.2
        finally:
            await services.close()

    async def test_default_token_store_is_empty(self) -> None:
        services = create_services(make_settings())
        try:
            assert isinstance(services.token_store, TokenManager)
            assert await services.token_store.get_access_token() is None
            assert await services.token_store.get_refresh_token() is None
        finally:
            await services.close()


class TestLifespan:
    """Tests for lifespan."""

    async def test_yields_services_and_closes_client(self, mocker) -> None:
        close = mocker.patch(
            "artistgraph.infrastructure.integrations.spotify_client.SpotifyClient.close"
        )

        async with lifespan(make_settings(), setup_logging=False) as services:
            assert services.graph.state.is_empty

        close.assert_awaited_once()

    async def test_closes_client_when_body_raises(self, mocker) -> None:
        close = mocker.patch(
            "artistgraph.infrastructure.integrations.spotify_client.SpotifyClient.close"
        )

        with pytest.raises(RuntimeError):
            async with lifespan(make_settings(), setup_logging=False):
                raise RuntimeError("boom")

        close.assert_awaited_once()

    async def test_missing_client_id(self) -> None:
        with pytest.raises(ConfigurationError):
            async with lifespan(make_settings(client_id=""), setup_logging=False):
                pass
