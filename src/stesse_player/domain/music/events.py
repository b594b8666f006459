"""Domain events published by the playlist and playback state machines."""

from __future__ import annotations

from stesse_player.domain.music.entities import PlaybackState, PlaylistState, Track
from stesse_player.domain.music.value_objects import EngineStatus
from stesse_player.domain.shared.events import DomainEvent


# === Playlist Events ===


class PlaylistChanged(DomainEvent):
    state: PlaylistState


class CurrentTrackChanged(DomainEvent):
    previous_track_id: str | None = None
    track: Track | None = None
    index: int | None = None


# === Playback Events ===


class PlaybackStateChanged(DomainEvent):
    previous_status: EngineStatus
    state: PlaybackState


class PlaybackReady(DomainEvent):
    url: str
    duration: float = 0.0


class PlaybackEnded(DomainEvent):
    url: str | None = None


class PlaybackFailed(DomainEvent):
    message: str
