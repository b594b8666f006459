"""Centralized message constants for error messages, validation, and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Playback Errors
    SINK_LOAD_FAILED = "Audio sink failed to load stream: {error}"
    TRACK_UNPLAYABLE = "Could not play '{title}': {reason}"

    # Credential Errors
    CLIENT_NOT_CONFIGURED = "SoundCloud client id/secret are not configured"
    TOKEN_EXCHANGE_UNREACHABLE = "Credential exchange endpoint unreachable: {error}"
    TOKEN_RESPONSE_INVALID = "Credential exchange returned an invalid payload"

    # Resolution Errors
    NO_PLAYABLE_FORMAT = "No playable format available (progressive required); available: {protocols}"
    NO_STREAM_SOURCE = "Track has neither a stream URL nor transcodings"
    RESOLUTION_UPSTREAM_REJECTED = "Failed to resolve stream ({status})"
    RESOLUTION_TRANSPORT = "Stream resolution request failed: {error}"
    RESOLUTION_MISSING_URL = "Resolution endpoint returned no url"
    STREAM_URL_REQUIRED = "URL parameter required"
    STREAM_NOT_AVAILABLE = "Stream not available"
    RESOLVE_PARAMS_REQUIRED = "No valid stream URL found"
    INVALID_PROXY_PATH = "Proxy path must be relative to the API base"
    UPSTREAM_NOT_JSON = "Upstream returned a non-JSON body"

    # Configuration Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "Expected a timezone-aware datetime"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Application Lifecycle
    APP_STARTING = "Starting stesse-player proxy ({environment}) on %s:%s"
    APP_STOPPED = "Proxy server stopped"
    APP_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down"
    APP_FATAL_ERROR = "Fatal error: %s"
    APP_SHUTDOWN_STEP_FAILED = "Failed closing %s: %r"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"
    KV_VALUE_UNREADABLE = "Discarding unreadable value for key %s: %s"

    # Event Bus
    EVENT_SUBSCRIBED = "Subscribed handler to: %s"
    EVENT_UNSUBSCRIBED = "Unsubscribed handler from %s"
    EVENT_HANDLER_ERROR = "Error in handler for %s"
    EVENT_CLEARED = "Cleared all event handlers"

    # Credentials
    TOKEN_CACHE_HIT = "Using cached SoundCloud token (expires in %.0fs)"
    TOKEN_REFRESHING = "Exchanging client credentials for a new token"
    TOKEN_JOIN_INFLIGHT = "Joining in-flight credential exchange"
    TOKEN_ACQUIRED = "Authenticated with SoundCloud (token valid for %ss)"
    TOKEN_REJECTED = "Credential exchange rejected: %s - %s"
    TOKEN_UNREACHABLE = "Credential exchange endpoint unreachable: %r"

    # Resolution
    RESOLVE_STARTED = "Resolving stream for track %s via %s"
    RESOLVE_PUBLIC = "Track %s carries a public stream URL"
    RESOLVE_DIRECT = "Track %s uses legacy stream_url, returning proxied locator"
    RESOLVE_NO_PROGRESSIVE = "No progressive transcoding for track %s; available formats: %s"
    RESOLVE_REJECTED = "Failed to resolve transcoding for track %s: %s %s"
    RESOLVE_SUCCEEDED = "Resolved progressive stream for track %s"
    RESOLVE_STALE = "Discarding stale resolution for track %s (current is %s)"
    RESOLVE_FAILED = "Stream resolution failed for track %s: %s"
    RESOLVE_MEMO_HIT = "Reusing resolved stream for track %s"

    # Catalog
    CATALOG_FETCHING = "Fetching genre '%s' with %d queries"
    CATALOG_QUERY_FAILED = "Failed to fetch \"%s\": %r"
    CATALOG_FETCHED = "Loaded %d tracks for genre '%s' (%d candidates)"
    CATALOG_FALLBACK = "Using sample data for genre '%s': %s"
    CATALOG_UNKNOWN_GENRE = "Unknown genre '%s', using lofi queries"
    CATALOG_RECORD_MALFORMED = "Skipping malformed track record in \"%s\""

    # Playback Engine
    ENGINE_LOADING = "Loading stream %s"
    ENGINE_READY = "Stream ready (duration %.1fs)"
    ENGINE_TRANSITION = "Playback state %s -> %s"
    ENGINE_IGNORED = "Ignoring %s while %s"
    ENGINE_ENDED = "Playback ended"
    ENGINE_ERROR = "Playback error: %s"
    ENGINE_SEEK_CLAMPED = "Seek to %.2f clamped to %.2f"

    # Playlist
    PLAYLIST_SET = "Playlist replaced: %d tracks, current index %s"
    PLAYLIST_DUPLICATES_DROPPED = "Dropped %d duplicate tracks from playlist"
    PLAYLIST_NAVIGATED = "Current track -> %s (index %s)"
    PLAYLIST_AT_BOUNDARY = "Playlist at boundary, repeat mode %s; index unchanged"
    PLAYLIST_SHUFFLE = "Shuffle %s"
    PLAYLIST_REPEAT = "Repeat mode changed to %s"

    # Session persistence
    SNAPSHOT_SAVED = "Saved player snapshot for track %s at %.1fs"
    SNAPSHOT_SAVE_FAILED = "Failed to save player snapshot"
    SNAPSHOT_LOADED = "Restored player snapshot for track %s at %.1fs"
    SNAPSHOT_LOAD_FAILED = "Failed to load player snapshot"
    SNAPSHOT_INVALID = "Discarding invalid player snapshot: %s"
    SNAPSHOT_LOOP_STARTED = "Snapshot loop started (every %ss)"
    SNAPSHOT_LOOP_STOPPED = "Snapshot loop stopped"
    SNAPSHOT_LOOP_RUNNING = "Snapshot loop is already running"
    SNAPSHOT_RESTORE_SEEK = "Restoring position %.1fs for track %s"
    PREFERENCE_SAVE_FAILED = "Failed to persist preference %s"

    # Player session
    SESSION_GENRE_SELECTED = "Genre selected: %s"
    SESSION_ADVANCE = "Track %s ended, advancing playlist"
    SESSION_REPLAY = "Replaying track %s"
    SESSION_STARTED = "Player session started"
    SESSION_CLOSED = "Player session closed"
    SESSION_TASK_FAILED = "Unexpected error in player task: %s"

    # Proxy
    PROXY_REQUEST = "Proxying request to: %s"
    PROXY_RESOLVE = "Resolving stream URL for: url=%s trackId=%s"
    PROXY_STREAM = "Streaming audio from: %s..."
    PROXY_STREAM_FAILED = "Stream fetch failed: %s"
    PROXY_STREAM_ERROR = "Upstream stream error: %r"
    PROXY_UNTRUSTED_HOST = "Refused to forward credentials to untrusted host %s"
