"""Core domain entities and state snapshots for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from stesse_player.domain.music.value_objects import (
    EngineStatus,
    RepeatMode,
    SourceRef,
)
from stesse_player.domain.shared.datetime_utils import utcnow
from stesse_player.domain.shared.types import (
    DurationSeconds,
    NonEmptyStr,
    NonNegativeFloat,
    NonNegativeInt,
    PlaybackRate,
    PlaylistIndex,
    TrackTitleStr,
    UnitInterval,
    UtcDatetimeField,
)

UNKNOWN_ARTIST = "Unknown Artist"
DEFAULT_ALBUM = "SoundCloud"
DEFAULT_COVER_URL = "https://via.placeholder.com/400"


class Track(BaseModel):
    """Immutable value object representing a playable catalog track."""

    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    title: TrackTitleStr
    artist: NonEmptyStr = UNKNOWN_ARTIST
    album: NonEmptyStr = DEFAULT_ALBUM
    duration_seconds: DurationSeconds = 0
    cover_url: str = DEFAULT_COVER_URL
    genre_tag: str = "Unknown"
    playback_count: NonNegativeInt = 0
    permalink_url: str | None = None
    source: SourceRef = Field(default_factory=SourceRef)

    @property
    def audio_url(self) -> str:
        """Best-known locator for the audio, before any resolution."""
        source = self.source
        if source.public_url:
            return source.public_url
        if source.stream_url:
            return source.stream_url
        if source.transcodings:
            return source.transcodings[0].url
        return ""

    @property
    def duration_formatted(self) -> str:
        """Format duration as M:SS or H:MM:SS."""
        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title, artist or album."""
        needle = query.lower()
        return (
            needle in self.title.lower()
            or needle in self.artist.lower()
            or needle in self.album.lower()
        )


class ResolvedStream(BaseModel):
    """A playable, authorized URL for one track. Never persisted."""

    model_config = ConfigDict(frozen=True)

    track_id: NonEmptyStr
    url: NonEmptyStr
    resolved_at: UtcDatetimeField = Field(default_factory=utcnow)


class Credential(BaseModel):
    """Bearer token issued by the client-credentials exchange."""

    model_config = ConfigDict(frozen=True)

    token: NonEmptyStr
    expires_at: float

    def is_fresh(self, now: float, skew_seconds: float) -> bool:
        return now < self.expires_at - skew_seconds

    def seconds_left(self, now: float) -> float:
        return self.expires_at - now


class PlaylistState(BaseModel):
    """Read-only snapshot of the playlist state machine."""

    model_config = ConfigDict(frozen=True)

    tracks: tuple[Track, ...] = ()
    current_index: PlaylistIndex | None = None
    shuffle_order: tuple[int, ...] | None = None
    repeat_mode: RepeatMode = RepeatMode.OFF
    search_query: str | None = None

    @property
    def is_shuffled(self) -> bool:
        return self.shuffle_order is not None

    @property
    def current_track(self) -> Track | None:
        if self.current_index is None:
            return None
        return self.tracks[self.current_index]

    @property
    def visible_tracks(self) -> tuple[Track, ...]:
        """Tracks matching the search query; all tracks when no query is set."""
        if not self.search_query:
            return self.tracks
        return tuple(t for t in self.tracks if t.matches(self.search_query))


class PlaybackState(BaseModel):
    """Read-only snapshot of the playback engine."""

    model_config = ConfigDict(frozen=True)

    status: EngineStatus = EngineStatus.IDLE
    current_time: NonNegativeFloat = 0.0
    duration: NonNegativeFloat = 0.0
    volume: UnitInterval = 0.7
    is_muted: bool = False
    playback_rate: PlaybackRate = 1.0
    last_error: str | None = None

    @property
    def is_playing(self) -> bool:
        return self.status.is_playing

    @property
    def is_loading(self) -> bool:
        return self.status == EngineStatus.LOADING

    @property
    def effective_volume(self) -> float:
        return 0.0 if self.is_muted else self.volume


class PersistedSnapshot(BaseModel):
    """Durable player snapshot, stored with the browser-era camelCase keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    current_track_id: str | None = Field(default=None, alias="currentTrackId")
    current_time: NonNegativeFloat = Field(default=0.0, alias="currentTime")
    volume: UnitInterval = 0.7
    is_shuffled: bool = Field(default=False, alias="isShuffled")
    repeat_mode: RepeatMode = Field(default=RepeatMode.OFF, alias="repeatMode")

    def to_storage(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
