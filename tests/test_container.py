"""
Unit Tests for Dependency Injection Container

Tests for:
- Lazy initialization and caching of every component
- Audio sink management (set_audio_sink, error when not set)
- Player session wiring
- Lifecycle methods (initialize, shutdown)
"""

from unittest.mock import AsyncMock

import pytest

from stesse_player.application.services.player_session import PlayerSession
from stesse_player.config.container import Container, create_container
from stesse_player.config.settings import DatabaseSettings, Settings
from stesse_player.infrastructure.soundcloud.catalog import SoundCloudCatalog
from stesse_player.infrastructure.soundcloud.token_cache import TokenCache


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="test",
        database=DatabaseSettings(url="sqlite:///:memory:"),
    )


@pytest.fixture
def container(settings):
    return create_container(settings)


class TestContainerComponents:
    """Unit tests for lazily created components."""

    def test_create_container(self, container, settings):
        assert isinstance(container, Container)
        assert container.settings is settings

    def test_components_cached(self, container):
        assert container.token_cache is container.token_cache
        assert container.catalog is container.catalog
        assert container.playlist is container.playlist

    def test_shared_http_client(self, container):
        assert isinstance(container.token_cache, TokenCache)
        assert container.soundcloud_client.tokens is container.token_cache

    def test_catalog_uses_player_limits(self, container):
        assert isinstance(container.catalog, SoundCloudCatalog)
        assert container.catalog._max_tracks == 50

    def test_audio_sink_required_for_engine(self, container):
        with pytest.raises(RuntimeError, match="Audio sink not set"):
            _ = container.playback_engine

    def test_player_session_wiring(self, container, audio_sink):
        container.set_audio_sink(audio_sink)

        session = container.player_session

        assert isinstance(session, PlayerSession)
        assert session.playlist is container.playlist
        assert session.engine is container.playback_engine
        assert audio_sink.listener is container.playback_engine


class TestContainerLifecycle:
    """Unit tests for initialize/shutdown."""

    @pytest.mark.asyncio
    async def test_initialize_creates_schema(self, container):
        await container.initialize()
        try:
            assert container.database.is_initialized is True
            await container.key_value_store.set("k", 1)
            assert await container.key_value_store.get("k") == 1
        finally:
            await container.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_closes_http_client(self, container):
        http = container.http_client

        await container.shutdown()

        assert http.is_closed is True
        assert container._http_client is None

    @pytest.mark.asyncio
    async def test_shutdown_closes_session(self, container, audio_sink):
        container.set_audio_sink(audio_sink)
        session = container.player_session
        session.aclose = AsyncMock()

        await container.shutdown()

        session.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_survives_session_failure(self, container, audio_sink):
        container.set_audio_sink(audio_sink)
        container.player_session.aclose = AsyncMock(side_effect=RuntimeError("boom"))

        await container.shutdown()
