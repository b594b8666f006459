"""Durable player snapshot: load once at startup, save periodically and at teardown."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from pydantic import ValidationError

from ...domain.music.entities import PersistedSnapshot
from ...domain.shared.constants import StorageKeys
from ...domain.shared.messages import LogTemplates
from ..interfaces.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

SnapshotProvider = Callable[[], PersistedSnapshot | None]


class SessionPersistence:
    """Owns the ``stesse_player_state`` record and the periodic save loop.

    Storage failures never reach the caller: they are logged and the player
    keeps running with whatever it has in memory.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        interval_seconds: float = 5.0,
        key: str = StorageKeys.PLAYER_STATE,
    ) -> None:
        self._store = store
        self._interval = interval_seconds
        self._key = key
        self._provider: SnapshotProvider | None = None
        self._pending_restore: PersistedSnapshot | None = None
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    # === Snapshot record ===

    async def load(self) -> PersistedSnapshot | None:
        try:
            raw = await self._store.get(self._key)
        except Exception:
            logger.exception(LogTemplates.SNAPSHOT_LOAD_FAILED)
            return None
        if raw is None:
            return None

        try:
            snapshot = PersistedSnapshot.model_validate(raw)
        except ValidationError as e:
            logger.warning(LogTemplates.SNAPSHOT_INVALID, e)
            return None

        self._pending_restore = snapshot
        logger.info(LogTemplates.SNAPSHOT_LOADED, snapshot.current_track_id, snapshot.current_time)
        return snapshot

    async def save(self, snapshot: PersistedSnapshot) -> bool:
        try:
            await self._store.set(self._key, snapshot.to_storage())
        except Exception:
            logger.exception(LogTemplates.SNAPSHOT_SAVE_FAILED)
            return False
        logger.debug(LogTemplates.SNAPSHOT_SAVED, snapshot.current_track_id, snapshot.current_time)
        return True

    def take_restore_position(self, track_id: str) -> float | None:
        """Saved position for the first track that becomes ready after startup.

        Consumed on the first call whatever the outcome, so a later track with
        the same id does not jump.
        """
        pending, self._pending_restore = self._pending_restore, None
        if pending is None or pending.current_track_id != track_id:
            return None
        if pending.current_time <= 0:
            return None
        return pending.current_time

    # === Single-value preferences ===

    async def load_preference(self, key: str, default: Any = None) -> Any:
        try:
            value = await self._store.get(key)
        except Exception:
            logger.exception(LogTemplates.SNAPSHOT_LOAD_FAILED)
            return default
        return default if value is None else value

    async def save_preference(self, key: str, value: Any) -> None:
        try:
            await self._store.set(key, value)
        except Exception:
            logger.exception(LogTemplates.PREFERENCE_SAVE_FAILED, key)

    # === Periodic loop ===

    def start(self, provider: SnapshotProvider) -> None:
        if self._running:
            logger.warning(LogTemplates.SNAPSHOT_LOOP_RUNNING)
            return

        self._provider = provider
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(LogTemplates.SNAPSHOT_LOOP_STARTED, self._interval)

    async def stop(self) -> None:
        """Cancel the loop and write one final snapshot."""
        was_running = self._running
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if was_running:
            await self.save_current()
            logger.info(LogTemplates.SNAPSHOT_LOOP_STOPPED)

    @asynccontextmanager
    async def running(self, provider: SnapshotProvider) -> AsyncIterator[SessionPersistence]:
        self.start(provider)
        try:
            yield self
        finally:
            await self.stop()

    async def save_current(self) -> bool:
        """Save what the provider reports; nothing is written without a current track."""
        if self._provider is None:
            return False
        snapshot = self._provider()
        if snapshot is None or snapshot.current_track_id is None:
            return False
        return await self.save(snapshot)

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break
            await self.save_current()
