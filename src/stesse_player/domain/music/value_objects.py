"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from stesse_player.domain.shared.types import NonEmptyStr

PROGRESSIVE_PROTOCOL = "progressive"


class Transcoding(BaseModel):
    """One encoding variant offered by the catalog for a track."""

    model_config = ConfigDict(frozen=True)

    url: NonEmptyStr
    protocol: str = "unknown"
    mime_type: str | None = None

    @property
    def is_progressive(self) -> bool:
        return self.protocol == PROGRESSIVE_PROTOCOL


class SourceRef(BaseModel):
    """Whatever the catalog needs to later resolve a stream for a track.

    - ``public_url``: already playable, needs no credentials (sample data)
    - ``stream_url``: legacy direct locator that must go through the proxy
    - ``transcodings``: encoding variants, each with its own resolution endpoint
    """

    model_config = ConfigDict(frozen=True)

    public_url: NonEmptyStr | None = None
    stream_url: NonEmptyStr | None = None
    transcodings: tuple[Transcoding, ...] = Field(default_factory=tuple)

    @property
    def is_streamable(self) -> bool:
        return bool(self.public_url or self.stream_url or self.transcodings)

    @property
    def protocols(self) -> list[str]:
        return [t.protocol for t in self.transcodings]


class RepeatMode(Enum):
    """Repeat mode settings for playlist playback."""

    OFF = "off"
    ALL = "all"  # Wrap around the playlist
    ONE = "one"  # Replay the current track

    def next_mode(self) -> RepeatMode:
        """Cycle to next repeat mode: off -> all -> one -> off."""
        modes = list(RepeatMode)
        current_index = modes.index(self)
        next_index = (current_index + 1) % len(modes)
        return modes[next_index]


class EngineStatus(Enum):
    """Playback engine state with enforced transitions.

    State transitions:
    - IDLE -> LOADING (load)
    - LOADING -> READY (sink reported duration)
    - READY -> PLAYING (play)
    - PLAYING <-> PAUSED
    - PLAYING -> ENDED (end of stream)
    - ENDED -> PLAYING (replay), ENDED -> PAUSED (seek back)
    - LOADING/READY/PLAYING/PAUSED -> ERROR (sink or resolution failure)
    - Any -> LOADING (fresh load, the only way out of ERROR)
    """

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"
    ERROR = "error"

    def can_transition_to(self, target: EngineStatus) -> bool:
        """Check if transition to target state is valid."""
        if target == EngineStatus.LOADING:
            return True
        valid_transitions = {
            EngineStatus.IDLE: set(),
            EngineStatus.LOADING: {EngineStatus.READY, EngineStatus.ERROR},
            EngineStatus.READY: {EngineStatus.PLAYING, EngineStatus.PAUSED, EngineStatus.ERROR},
            EngineStatus.PLAYING: {EngineStatus.PAUSED, EngineStatus.ENDED, EngineStatus.ERROR},
            EngineStatus.PAUSED: {EngineStatus.PLAYING, EngineStatus.ENDED, EngineStatus.ERROR},
            EngineStatus.ENDED: {EngineStatus.PLAYING, EngineStatus.PAUSED},
            EngineStatus.ERROR: set(),
        }
        return target in valid_transitions.get(self, set())

    @property
    def has_media(self) -> bool:
        """True once the sink reported readiness for the loaded stream."""
        return self in {
            EngineStatus.READY,
            EngineStatus.PLAYING,
            EngineStatus.PAUSED,
            EngineStatus.ENDED,
        }

    @property
    def is_playing(self) -> bool:
        return self == EngineStatus.PLAYING
