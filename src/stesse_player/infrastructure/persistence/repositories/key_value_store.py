"""SQLite implementation of the key-value store."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from stesse_player.application.interfaces.key_value_store import KeyValueStore
from stesse_player.domain.shared.datetime_utils import utcnow
from stesse_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, key: str) -> Any | None:
        row = await self._db.fetch_one("SELECT value FROM kv_store WHERE key = ?", (key,))
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.warning(LogTemplates.KV_VALUE_UNREADABLE, key, e)
            return None

    async def set(self, key: str, value: Any) -> None:
        await self._db.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, json.dumps(value), utcnow().isoformat()),
        )

    async def delete(self, key: str) -> bool:
        deleted = await self._db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        return deleted > 0
