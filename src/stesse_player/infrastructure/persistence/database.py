"""SQLite storage for the player's durable key-value records.

One short-lived aiosqlite connection per operation; WAL journaling so the
snapshot loop never blocks readers.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

import aiosqlite

from stesse_player.domain.shared.constants import DatabaseTables, SQLPragmas
from stesse_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import DatabaseSettings

logger = logging.getLogger(__name__)

MEMORY_PATH: Final[str] = ":memory:"
SHARED_MEMORY_URI: Final[str] = "file:stesse-player?mode=memory&cache=shared"

KV_SCHEMA: Final[str] = f"""
CREATE TABLE IF NOT EXISTS {DatabaseTables.KV_STORE} (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now'))
)
"""


def path_from_url(url: str) -> str:
    """``sqlite:///data/player.db`` -> ``data/player.db``; empty paths mean memory."""
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            return url[len(prefix):] or MEMORY_PATH
    return url or MEMORY_PATH


class Database:
    def __init__(self, url: str, settings: DatabaseSettings | None = None) -> None:
        self._db_path = path_from_url(url)
        self._busy_timeout = settings.busy_timeout_ms if settings else 5000
        self._connection_timeout = settings.connection_timeout_s if settings else 10

        self._initialized = False
        # Holds a shared in-memory database open between operations.
        self._keepalive_conn: aiosqlite.Connection | None = None

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_memory(self) -> bool:
        return self._db_path == MEMORY_PATH

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        if self._initialized:
            return

        if self.is_memory:
            if self._keepalive_conn is None:
                self._keepalive_conn = await self._connect()
        else:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        async with self.transaction() as conn:
            await conn.execute(KV_SCHEMA)

        self._initialized = True
        logger.info(LogTemplates.DATABASE_INITIALIZED, self._db_path)

    async def _connect(self) -> aiosqlite.Connection:
        if self.is_memory:
            conn = await aiosqlite.connect(
                SHARED_MEMORY_URI, uri=True, timeout=self._connection_timeout
            )
        else:
            conn = await aiosqlite.connect(self._db_path, timeout=self._connection_timeout)

        conn.row_factory = aiosqlite.Row
        await conn.execute(SQLPragmas.JOURNAL_MODE_WAL)
        await conn.execute(SQLPragmas.BUSY_TIMEOUT.format(timeout=self._busy_timeout))
        return conn

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        conn = await self._connect()
        try:
            yield conn
        finally:
            await conn.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Commit on success, roll back on any error."""
        async with self.connection() as conn:
            try:
                yield conn
            except Exception:
                await conn.rollback()
                raise
            await conn.commit()

    async def execute(self, sql: str, parameters: tuple[Any, ...] = ()) -> int:
        """Run one statement in its own transaction and return the affected row count."""
        async with self.transaction() as conn:
            cursor = await conn.execute(sql, parameters)
            return cursor.rowcount

    async def fetch_one(self, sql: str, parameters: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        async with self.connection() as conn:
            cursor = await conn.execute(sql, parameters)
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def close(self) -> None:
        if self._keepalive_conn is not None:
            try:
                await self._keepalive_conn.close()
            finally:
                self._keepalive_conn = None
        self._initialized = False
        logger.info(LogTemplates.DATABASE_CLOSED)
