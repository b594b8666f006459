"""Player session: wires the playlist, engine, resolver and persistence together."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import (
    PersistedSnapshot,
    PlaybackState,
    PlaylistState,
    ResolvedStream,
    Track,
)
from ...domain.music.events import CurrentTrackChanged, PlaybackEnded, PlaybackReady
from ...domain.music.value_objects import RepeatMode
from ...domain.shared.constants import StorageKeys
from ...domain.shared.exceptions import DomainError
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.music.playlist import PlaylistController
    from ..interfaces.catalog import Catalog
    from ..interfaces.stream_resolver import StreamResolver
    from .playback_engine import PlaybackEngine
    from .session_persistence import SessionPersistence

logger = logging.getLogger(__name__)


class PlayerView(BaseModel):
    """Combined read-only snapshot of everything a UI renders."""

    model_config = ConfigDict(frozen=True)

    genre: str | None = None
    playlist: PlaylistState
    playback: PlaybackState


class PlayerSession:
    """Reacts to state-machine events; the two machines never call each other.

    - ``CurrentTrackChanged`` -> resolve the stream, then load it
    - ``PlaybackEnded`` -> advance the playlist (or replay under repeat)
    - ``PlaybackReady`` -> one-off restore seek from the saved snapshot

    Only the latest requested track may reach the engine: a resolution that
    finishes after the user moved on is dropped.
    """

    def __init__(
        self,
        *,
        playlist: PlaylistController,
        engine: PlaybackEngine,
        resolver: StreamResolver,
        catalog: Catalog,
        persistence: SessionPersistence,
        restore_settle_seconds: float = 0.1,
    ) -> None:
        self.playlist = playlist
        self.engine = engine
        self._resolver = resolver
        self._catalog = catalog
        self._persistence = persistence
        self._settle = restore_settle_seconds

        self._genre: str | None = None
        self._requested_track_id: str | None = None
        self._resolved: ResolvedStream | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._unsubscribers: list[Callable[[], None]] = [
            playlist.events.subscribe(CurrentTrackChanged, self._on_track_changed),
            engine.events.subscribe(PlaybackEnded, self._on_ended),
            engine.events.subscribe(PlaybackReady, self._on_ready),
        ]

    @property
    def genre(self) -> str | None:
        return self._genre

    # === Lifecycle ===

    async def start(self, *, restore_genre: bool = True) -> PersistedSnapshot | None:
        """Restore saved preferences and begin periodic snapshots."""
        snapshot = await self._persistence.load()
        if snapshot is not None:
            await self.engine.change_volume(snapshot.volume)
            self.playlist.set_shuffle(snapshot.is_shuffled)
            self.playlist.set_repeat_mode(snapshot.repeat_mode)

        if await self._persistence.load_preference(StorageKeys.IS_MUTED, False):
            await self.engine.set_muted(True)

        self._persistence.start(self.persisted_snapshot)

        saved_genre = await self._persistence.load_preference(StorageKeys.SELECTED_GENRE)
        if restore_genre and isinstance(saved_genre, str) and saved_genre:
            await self.select_genre(saved_genre)

        logger.info(LogTemplates.SESSION_STARTED)
        return snapshot

    async def aclose(self) -> None:
        await self._persistence.stop()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info(LogTemplates.SESSION_CLOSED)

    async def __aenter__(self) -> PlayerSession:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # === Commands ===

    async def select_genre(self, genre: str) -> list[Track]:
        tracks = await self._catalog.fetch_by_genre(genre)
        self._genre = genre
        logger.info(LogTemplates.SESSION_GENRE_SELECTED, genre)
        self.playlist.set_playlist(tracks)
        await self._persistence.save_preference(StorageKeys.SELECTED_GENRE, genre)
        return tracks

    async def toggle_mute(self) -> bool:
        muted = await self.engine.toggle_mute()
        await self._persistence.save_preference(StorageKeys.IS_MUTED, muted)
        return muted

    async def reload_current(self) -> None:
        """Load the current track again, reusing its resolved stream when known."""
        track = self.playlist.current_track
        if track is None:
            return
        self._requested_track_id = track.id
        await self._load_track(track)

    async def wait_idle(self) -> None:
        """Wait for pending resolve/load/seek work scheduled by events."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # === Read side ===

    def view(self) -> PlayerView:
        return PlayerView(
            genre=self._genre,
            playlist=self.playlist.state,
            playback=self.engine.state,
        )

    def persisted_snapshot(self) -> PersistedSnapshot | None:
        track = self.playlist.current_track
        if track is None:
            return None
        playback = self.engine.state
        return PersistedSnapshot(
            current_track_id=track.id,
            current_time=playback.current_time,
            volume=playback.volume,
            is_shuffled=self.playlist.is_shuffled,
            repeat_mode=self.playlist.repeat_mode,
        )

    # === Event handlers ===

    def _on_track_changed(self, event: CurrentTrackChanged) -> None:
        track = event.track
        self._requested_track_id = track.id if track else None
        if self._resolved is not None and (track is None or self._resolved.track_id != track.id):
            self._resolved = None
        if track is not None:
            self._spawn(self._load_track(track))

    def _on_ended(self, event: PlaybackEnded) -> None:
        self._spawn(self._advance())

    def _on_ready(self, event: PlaybackReady) -> None:
        track = self.playlist.current_track
        if track is None or self._resolved is None or self._resolved.track_id != track.id:
            return
        position = self._persistence.take_restore_position(track.id)
        if position is not None:
            self._spawn(self._restore_seek(track.id, position))

    # === Work ===

    async def _load_track(self, track: Track) -> None:
        stream = self._resolved if self._resolved and self._resolved.track_id == track.id else None
        autoplay = True
        if stream is not None:
            logger.debug(LogTemplates.RESOLVE_MEMO_HIT, track.id)
        else:
            await self.engine.begin_loading()
            try:
                stream = await self._resolver.resolve(track)
            except DomainError as e:
                if self._is_stale(track.id):
                    return
                logger.warning(LogTemplates.RESOLVE_FAILED, track.id, e.message)
                self.engine.report_error(
                    ErrorMessages.TRACK_UNPLAYABLE.format(title=track.title, reason=e.message)
                )
                return
            if self._is_stale(track.id):
                return
            self._resolved = stream
            autoplay = self.engine.play_requested

        await self.engine.load(stream.url, autoplay=autoplay)

    def _is_stale(self, track_id: str) -> bool:
        if self._requested_track_id == track_id:
            return False
        logger.info(LogTemplates.RESOLVE_STALE, track_id, self._requested_track_id)
        return True

    async def _advance(self) -> None:
        finished = self.playlist.current_track
        if finished is None:
            return
        logger.info(LogTemplates.SESSION_ADVANCE, finished.id)
        self.playlist.play_next()

        current = self.playlist.current_track
        if current is not None and current.id == finished.id:
            # repeat=one, or repeat=all over a single track; repeat=off stops here
            if self.playlist.repeat_mode != RepeatMode.OFF:
                logger.info(LogTemplates.SESSION_REPLAY, finished.id)
                await self.engine.restart()

    async def _restore_seek(self, track_id: str, position: float) -> None:
        if self._settle > 0:
            await asyncio.sleep(self._settle)
        current = self.playlist.current_track
        if current is None or current.id != track_id:
            return
        logger.info(LogTemplates.SNAPSHOT_RESTORE_SEEK, position, track_id)
        await self.engine.seek(position)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(LogTemplates.SESSION_TASK_FAILED, exc, exc_info=exc)
