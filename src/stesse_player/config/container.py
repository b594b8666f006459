"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for adapters, state machines and services.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import httpx

    from ..application.interfaces.audio_sink import AudioSink
    from ..application.interfaces.key_value_store import KeyValueStore
    from ..application.services.playback_engine import PlaybackEngine
    from ..application.services.player_session import PlayerSession
    from ..application.services.session_persistence import SessionPersistence
    from ..domain.music.playlist import PlaylistController
    from ..infrastructure.persistence.database import Database
    from ..infrastructure.soundcloud.catalog import SoundCloudCatalog
    from ..infrastructure.soundcloud.client import SoundCloudClient
    from ..infrastructure.soundcloud.stream_resolver import SoundCloudStreamResolver
    from ..infrastructure.soundcloud.token_cache import TokenCache
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. The audio sink is
    supplied by the embedding application through ``set_audio_sink``.
    """

    settings: Settings
    _audio_sink: AudioSink | None = None

    # Persistence layer
    _database: Database | None = None
    _key_value_store: KeyValueStore | None = None

    # Infrastructure adapters
    _http_client: httpx.AsyncClient | None = None
    _token_cache: TokenCache | None = None
    _soundcloud_client: SoundCloudClient | None = None
    _stream_resolver: SoundCloudStreamResolver | None = None
    _catalog: SoundCloudCatalog | None = None

    # State machines and services
    _playlist: PlaylistController | None = None
    _playback_engine: PlaybackEngine | None = None
    _session_persistence: SessionPersistence | None = None
    _player_session: PlayerSession | None = None

    def set_audio_sink(self, sink: AudioSink) -> None:
        self._audio_sink = sink

    @property
    def audio_sink(self) -> AudioSink:
        if self._audio_sink is None:
            raise RuntimeError("Audio sink not set. Call set_audio_sink() first.")
        return self._audio_sink

    # === Database ===

    @property
    def database(self) -> Database:
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def key_value_store(self) -> KeyValueStore:
        if self._key_value_store is None:
            from ..infrastructure.persistence.repositories.key_value_store import (
                SQLiteKeyValueStore,
            )

            self._key_value_store = SQLiteKeyValueStore(self.database)
        return self._key_value_store

    # === SoundCloud ===

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            from ..infrastructure.soundcloud.client import build_http_client

            self._http_client = build_http_client(self.settings.soundcloud)
        return self._http_client

    @property
    def token_cache(self) -> TokenCache:
        if self._token_cache is None:
            from ..infrastructure.soundcloud.token_cache import TokenCache

            self._token_cache = TokenCache(self.settings.soundcloud, self.http_client)
        return self._token_cache

    @property
    def soundcloud_client(self) -> SoundCloudClient:
        if self._soundcloud_client is None:
            from ..infrastructure.soundcloud.client import SoundCloudClient

            self._soundcloud_client = SoundCloudClient(
                self.settings.soundcloud, self.http_client, self.token_cache
            )
        return self._soundcloud_client

    @property
    def stream_resolver(self) -> SoundCloudStreamResolver:
        if self._stream_resolver is None:
            from ..infrastructure.soundcloud.stream_resolver import SoundCloudStreamResolver

            self._stream_resolver = SoundCloudStreamResolver(
                self.soundcloud_client,
                public_base_url=self.settings.proxy.public_base_url,
            )
        return self._stream_resolver

    @property
    def catalog(self) -> SoundCloudCatalog:
        if self._catalog is None:
            from ..infrastructure.soundcloud.catalog import SoundCloudCatalog

            self._catalog = SoundCloudCatalog(
                self.soundcloud_client,
                max_tracks=self.settings.player.max_tracks,
                per_query_limit=self.settings.player.per_query_limit,
            )
        return self._catalog

    # === Player ===

    @property
    def playlist(self) -> PlaylistController:
        if self._playlist is None:
            from ..domain.music.playlist import PlaylistController

            self._playlist = PlaylistController()
        return self._playlist

    @property
    def playback_engine(self) -> PlaybackEngine:
        if self._playback_engine is None:
            from ..application.services.playback_engine import PlaybackEngine

            self._playback_engine = PlaybackEngine(
                self.audio_sink, default_volume=self.settings.player.default_volume
            )
        return self._playback_engine

    @property
    def session_persistence(self) -> SessionPersistence:
        if self._session_persistence is None:
            from ..application.services.session_persistence import SessionPersistence

            self._session_persistence = SessionPersistence(
                self.key_value_store,
                interval_seconds=self.settings.player.snapshot_interval_seconds,
            )
        return self._session_persistence

    @property
    def player_session(self) -> PlayerSession:
        if self._player_session is None:
            from ..application.services.player_session import PlayerSession

            self._player_session = PlayerSession(
                playlist=self.playlist,
                engine=self.playback_engine,
                resolver=self.stream_resolver,
                catalog=self.catalog,
                persistence=self.session_persistence,
                restore_settle_seconds=self.settings.player.restore_settle_seconds,
            )
        return self._player_session

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._player_session is not None:
            try:
                await self._player_session.aclose()
            except Exception as exc:
                logger.warning(LogTemplates.APP_SHUTDOWN_STEP_FAILED, "player session", exc)

        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
