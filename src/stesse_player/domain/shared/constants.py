"""Centralized constants for storage keys, database schema, and upstream API values."""

from __future__ import annotations


class StorageKeys:
    """Keys under which player state lives in the durable key-value store.

    The camelCase names match the keys the browser player wrote to
    localStorage, so existing saved state keeps loading.
    """

    PLAYER_STATE = "stesse_player_state"
    SELECTED_GENRE = "selectedGenre"
    IS_MUTED = "isMuted"


class DatabaseTables:
    KV_STORE = "kv_store"


class SQLPragmas:
    """SQLite PRAGMA statements applied to each connection."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class SoundCloudApi:
    """Upstream API paths, parameters and header values."""

    TRACKS_PATH = "/tracks"
    TRACK_PATH = "/tracks/{track_id}"
    AUTH_SCHEME = "OAuth"
    GRANT_TYPE = "client_credentials"
    CLIENT_ID_PARAM = "client_id"
    LINKED_PARTITIONING = "true"


class StreamHeaders:
    """Response headers the stream proxy always sets."""

    DEFAULT_CONTENT_TYPE = "audio/mpeg"
    ACCEPT_RANGES = "bytes"
    CACHE_CONTROL = "public, max-age=3600"
