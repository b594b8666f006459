"""SQLite implementations of the storage ports."""

from stesse_player.infrastructure.persistence.repositories.key_value_store import (
    SQLiteKeyValueStore,
)

__all__ = ["SQLiteKeyValueStore"]
