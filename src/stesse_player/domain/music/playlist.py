"""Playlist state machine: ordered tracks, current pointer, shuffle, repeat and search."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from stesse_player.domain.music.entities import PlaylistState, Track
from stesse_player.domain.music.events import CurrentTrackChanged, PlaylistChanged
from stesse_player.domain.music.value_objects import RepeatMode
from stesse_player.domain.shared.events import EventBus
from stesse_player.domain.shared.exceptions import NotFoundError, OutOfRangeError
from stesse_player.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class PlaylistController:
    """Exclusive owner of the playlist state.

    Every mutation publishes ``PlaylistChanged``; mutations that move the
    pointer to a different track also publish ``CurrentTrackChanged``.
    Failed navigation raises before anything is touched.
    """

    def __init__(self, *, rng: random.Random | None = None, events: EventBus | None = None) -> None:
        self._rng = rng or random.Random()
        self.events = events or EventBus()

        self._tracks: tuple[Track, ...] = ()
        self._index: int | None = None
        self._shuffle_order: tuple[int, ...] | None = None
        self._repeat_mode = RepeatMode.OFF
        self._search_query: str | None = None

    # === Read side ===

    @property
    def state(self) -> PlaylistState:
        return PlaylistState(
            tracks=self._tracks,
            current_index=self._index,
            shuffle_order=self._shuffle_order,
            repeat_mode=self._repeat_mode,
            search_query=self._search_query,
        )

    @property
    def current_track(self) -> Track | None:
        if self._index is None:
            return None
        return self._tracks[self._index]

    @property
    def current_index(self) -> int | None:
        return self._index

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    @property
    def visible_tracks(self) -> tuple[Track, ...]:
        return self.state.visible_tracks

    @property
    def is_shuffled(self) -> bool:
        return self._shuffle_order is not None

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._repeat_mode

    # === Playlist replacement ===

    def set_playlist(self, tracks: Iterable[Track]) -> None:
        """Replace the tracks, keeping the current track when it survives."""
        unique: dict[str, Track] = {}
        incoming = list(tracks)
        for track in incoming:
            unique.setdefault(track.id, track)
        if len(unique) != len(incoming):
            logger.debug(LogTemplates.PLAYLIST_DUPLICATES_DROPPED, len(incoming) - len(unique))

        previous = self.current_track
        new_tracks = tuple(unique.values())

        if not new_tracks:
            new_index = None
        elif previous is None:
            new_index = 0
        else:
            new_index = next(
                (i for i, t in enumerate(new_tracks) if t.id == previous.id),
                0,
            )

        self._tracks = new_tracks
        self._index = new_index
        if self._shuffle_order is not None:
            self._shuffle_order = self._build_shuffle_order()

        logger.info(LogTemplates.PLAYLIST_SET, len(new_tracks), new_index)
        self._publish_changed()
        self._publish_track_change(previous)

    # === Navigation ===

    def play_next(self) -> int | None:
        """Advance according to shuffle and repeat; returns the current index."""
        return self._step(1)

    def play_previous(self) -> int | None:
        """Step back according to shuffle and repeat; returns the current index."""
        return self._step(-1)

    def play_track_at_index(self, index: int) -> Track:
        if not 0 <= index < len(self._tracks):
            raise OutOfRangeError(index, len(self._tracks))
        self._move_to(index)
        return self._tracks[index]

    def play_track_by_id(self, track_id: str) -> Track:
        for i, track in enumerate(self._tracks):
            if track.id == track_id:
                self._move_to(i)
                return track
        raise NotFoundError("Track", track_id)

    def _step(self, direction: int) -> int | None:
        if self._index is None:
            return None
        if self._repeat_mode == RepeatMode.ONE:
            return self._index

        order = self._shuffle_order or tuple(range(len(self._tracks)))
        position = order.index(self._index) + direction

        if not 0 <= position < len(order):
            if self._repeat_mode != RepeatMode.ALL:
                logger.debug(LogTemplates.PLAYLIST_AT_BOUNDARY, self._repeat_mode.value)
                return self._index
            position %= len(order)

        self._move_to(order[position])
        return self._index

    def _move_to(self, index: int) -> None:
        previous = self.current_track
        if index == self._index:
            return
        self._index = index
        self._publish_changed()
        self._publish_track_change(previous)

    # === Modes ===

    def toggle_shuffle(self) -> bool:
        """Enable shuffle with a fresh permutation, or discard it; returns the new flag."""
        self.set_shuffle(self._shuffle_order is None)
        return self.is_shuffled

    def set_shuffle(self, enabled: bool) -> None:
        if enabled == self.is_shuffled:
            return
        self._shuffle_order = self._build_shuffle_order() if enabled else None
        logger.info(LogTemplates.PLAYLIST_SHUFFLE, "enabled" if enabled else "disabled")
        self._publish_changed()

    def _build_shuffle_order(self) -> tuple[int, ...]:
        """Random permutation of every index, starting at the current track.

        Starting at the current track means a full pass under repeat=all visits
        every other track exactly once before coming back around.
        """
        rest = [i for i in range(len(self._tracks)) if i != self._index]
        self._rng.shuffle(rest)
        if self._index is None:
            return tuple(rest)
        return (self._index, *rest)

    def toggle_repeat(self) -> RepeatMode:
        """Cycle repeat mode off -> all -> one -> off and return the new mode."""
        self.set_repeat_mode(self._repeat_mode.next_mode())
        return self._repeat_mode

    def set_repeat_mode(self, mode: RepeatMode) -> None:
        if mode == self._repeat_mode:
            return
        self._repeat_mode = mode
        logger.info(LogTemplates.PLAYLIST_REPEAT, mode.value)
        self._publish_changed()

    # === Search view ===

    def update_search_query(self, query: str) -> None:
        self._search_query = query or None
        self._publish_changed()

    def clear_search(self) -> None:
        self.update_search_query("")

    # === Events ===

    def _publish_changed(self) -> None:
        self.events.publish(PlaylistChanged(state=self.state))

    def _publish_track_change(self, previous: Track | None) -> None:
        current = self.current_track
        previous_id = previous.id if previous else None
        current_id = current.id if current else None
        if previous_id == current_id:
            return
        logger.info(LogTemplates.PLAYLIST_NAVIGATED, current_id, self._index)
        self.events.publish(
            CurrentTrackChanged(previous_track_id=previous_id, track=current, index=self._index)
        )
