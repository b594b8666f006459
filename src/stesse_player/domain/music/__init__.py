"""
Music Bounded Context

Domain logic for tracks, the playlist state machine and stream selection.
"""

from stesse_player.domain.music.entities import (
    Credential,
    PersistedSnapshot,
    PlaybackState,
    PlaylistState,
    ResolvedStream,
    Track,
)
from stesse_player.domain.music.events import (
    CurrentTrackChanged,
    PlaybackEnded,
    PlaybackFailed,
    PlaybackReady,
    PlaybackStateChanged,
    PlaylistChanged,
)
from stesse_player.domain.music.playlist import PlaylistController
from stesse_player.domain.music.value_objects import (
    EngineStatus,
    RepeatMode,
    SourceRef,
    Transcoding,
)

__all__ = [
    # Entities
    "Track",
    "ResolvedStream",
    "Credential",
    "PlaylistState",
    "PlaybackState",
    "PersistedSnapshot",
    # Value Objects
    "SourceRef",
    "Transcoding",
    "RepeatMode",
    "EngineStatus",
    # Events
    "PlaylistChanged",
    "CurrentTrackChanged",
    "PlaybackStateChanged",
    "PlaybackReady",
    "PlaybackEnded",
    "PlaybackFailed",
    # State machines
    "PlaylistController",
]
