"""Playback Engine - transport controls and state derived from one audio sink."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Final

from ...domain.music.entities import PlaybackState
from ...domain.music.events import (
    PlaybackEnded,
    PlaybackFailed,
    PlaybackReady,
    PlaybackStateChanged,
)
from ...domain.music.value_objects import EngineStatus
from ...domain.shared.events import EventBus
from ...domain.shared.exceptions import SinkError
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ..interfaces.audio_sink import AudioSink

logger = logging.getLogger(__name__)

MIN_PLAYBACK_RATE: Final[float] = 0.25
MAX_PLAYBACK_RATE: Final[float] = 4.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class PlaybackEngine:
    """Exclusive owner of the playback state.

    The engine never advances the playlist on its own: at end of stream it
    only moves to ``ENDED`` and publishes ``PlaybackEnded``. Whoever watches
    for that event decides what plays next.

    The sink is told to play right after ``load`` when autoplay is wanted;
    the engine reports ``PLAYING`` only once the sink signalled readiness.
    """

    def __init__(
        self,
        sink: AudioSink,
        *,
        default_volume: float = 0.7,
        events: EventBus | None = None,
    ) -> None:
        self._sink = sink
        self.events = events or EventBus()

        self._status = EngineStatus.IDLE
        self._current_time = 0.0
        self._duration = 0.0
        self._volume = _clamp(default_volume, 0.0, 1.0)
        self._muted = False
        self._rate = 1.0
        self._last_error: str | None = None
        self._url: str | None = None
        self._play_requested = False

        self._sink.set_listener(self)

    # === Read side ===

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            status=self._status,
            current_time=self._current_time,
            duration=self._duration,
            volume=self._volume,
            is_muted=self._muted,
            playback_rate=self._rate,
            last_error=self._last_error,
        )

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def play_requested(self) -> bool:
        """Whether the stream should start once loaded; cleared by a pause while loading."""
        return self._play_requested

    # === Loading ===

    async def begin_loading(self) -> None:
        """Enter LOADING before a URL is known (stream resolution in progress)."""
        was_playing = self._status == EngineStatus.PLAYING
        self._reset_media()
        self._url = None
        self._play_requested = True
        self._transition(EngineStatus.LOADING)
        if was_playing:
            await self._sink_call("pause", self._sink.pause())

    async def load(self, url: str, *, autoplay: bool = True) -> bool:
        """Load a stream; the only way out of ERROR."""
        logger.info(LogTemplates.ENGINE_LOADING, url[:100])
        self._reset_media()
        self._url = url
        self._play_requested = autoplay
        self._transition(EngineStatus.LOADING)

        if not await self._sink_call("load", self._sink.load(url)):
            return False
        await self._sink_call("set_volume", self._sink.set_volume(self._effective_volume()))
        await self._sink_call("set_rate", self._sink.set_rate(self._rate))
        if autoplay:
            return await self._sink_call("play", self._sink.play())
        return True

    def report_error(self, message: str) -> None:
        """Surface a failure that happened before the sink was involved."""
        self._fail(message)

    def _reset_media(self) -> None:
        self._current_time = 0.0
        self._duration = 0.0
        self._last_error = None

    # === Transport ===

    async def play(self) -> bool:
        status = self._status
        if status == EngineStatus.LOADING:
            self._play_requested = True
            if self._url is None:
                return True
            return await self._sink_call("play", self._sink.play())
        if status in (EngineStatus.READY, EngineStatus.PAUSED):
            if not await self._sink_call("play", self._sink.play()):
                return False
            self._transition(EngineStatus.PLAYING)
            return True
        if status == EngineStatus.ENDED:
            return await self.restart()
        if status != EngineStatus.PLAYING:
            logger.debug(LogTemplates.ENGINE_IGNORED, "play", status.value)
        return status == EngineStatus.PLAYING

    async def pause(self) -> bool:
        status = self._status
        if status == EngineStatus.LOADING:
            self._play_requested = False
            if self._url is not None:
                await self._sink_call("pause", self._sink.pause())
            self._publish_state(status)
            return True
        if status == EngineStatus.PLAYING:
            if not await self._sink_call("pause", self._sink.pause()):
                return False
            self._transition(EngineStatus.PAUSED)
            return True
        logger.debug(LogTemplates.ENGINE_IGNORED, "pause", status.value)
        return False

    async def toggle_play(self) -> bool:
        if self._status == EngineStatus.PLAYING or (
            self._status == EngineStatus.LOADING and self._play_requested
        ):
            return await self.pause()
        return await self.play()

    async def restart(self) -> bool:
        """Play the loaded stream again from the top."""
        if not self._status.has_media:
            logger.debug(LogTemplates.ENGINE_IGNORED, "restart", self._status.value)
            return False
        if not await self._sink_call("seek", self._sink.seek(0.0)):
            return False
        self._current_time = 0.0
        if not await self._sink_call("play", self._sink.play()):
            return False
        if self._status != EngineStatus.PLAYING:
            self._transition(EngineStatus.PLAYING)
        else:
            self._publish_state(self._status)
        return True

    async def seek(self, seconds: float) -> float | None:
        """Seek within ``[0, duration]``; ignored until the sink reported readiness."""
        if not self._status.has_media:
            logger.debug(LogTemplates.ENGINE_IGNORED, "seek", self._status.value)
            return None

        target = _clamp(seconds, 0.0, self._duration)
        if target != seconds:
            logger.debug(LogTemplates.ENGINE_SEEK_CLAMPED, seconds, target)
        if not await self._sink_call("seek", self._sink.seek(target)):
            return None

        self._current_time = target
        if self._status == EngineStatus.ENDED and target < self._duration:
            self._transition(EngineStatus.PAUSED)
        else:
            self._publish_state(self._status)
        return target

    async def change_volume(self, volume: float) -> float:
        """Clamp to ``[0, 1]`` and remember it; while muted the sink stays silent."""
        self._volume = _clamp(volume, 0.0, 1.0)
        if not self._muted:
            await self._sink_call("set_volume", self._sink.set_volume(self._volume))
        self._publish_state(self._status)
        return self._volume

    async def toggle_mute(self) -> bool:
        self._muted = not self._muted
        await self._sink_call("set_volume", self._sink.set_volume(self._effective_volume()))
        self._publish_state(self._status)
        return self._muted

    async def set_muted(self, muted: bool) -> None:
        if muted != self._muted:
            await self.toggle_mute()

    async def change_playback_rate(self, rate: float) -> float:
        self._rate = _clamp(rate, MIN_PLAYBACK_RATE, MAX_PLAYBACK_RATE)
        await self._sink_call("set_rate", self._sink.set_rate(self._rate))
        self._publish_state(self._status)
        return self._rate

    def _effective_volume(self) -> float:
        return 0.0 if self._muted else self._volume

    # === Sink events ===

    def on_time_update(self, current_time: float) -> None:
        self._current_time = max(0.0, current_time)
        self._publish_state(self._status)

    def on_duration_known(self, duration: float) -> None:
        self._duration = max(0.0, duration)
        if self._status != EngineStatus.LOADING:
            self._publish_state(self._status)
            return

        logger.debug(LogTemplates.ENGINE_READY, self._duration)
        self._transition(EngineStatus.READY)
        self.events.publish(PlaybackReady(url=self._url or "", duration=self._duration))
        if self._play_requested and self._status == EngineStatus.READY:
            self._transition(EngineStatus.PLAYING)

    def on_ended(self) -> None:
        if not self._status.can_transition_to(EngineStatus.ENDED):
            logger.debug(LogTemplates.ENGINE_IGNORED, "ended", self._status.value)
            return
        self._current_time = self._duration
        self._transition(EngineStatus.ENDED)
        logger.info(LogTemplates.ENGINE_ENDED)
        self.events.publish(PlaybackEnded(url=self._url))

    def on_error(self, error: str) -> None:
        self._fail(ErrorMessages.SINK_LOAD_FAILED.format(error=error))

    # === Internals ===

    async def _sink_call(self, operation: str, call: Awaitable[None]) -> bool:
        try:
            await call
            return True
        except Exception as e:
            logger.exception(LogTemplates.ENGINE_ERROR, operation)
            self._fail(str(SinkError(ErrorMessages.SINK_LOAD_FAILED.format(error=e))))
            return False

    def _fail(self, message: str) -> None:
        logger.warning(LogTemplates.ENGINE_ERROR, message)
        self._last_error = message
        self._play_requested = False
        if not self._transition(EngineStatus.ERROR):
            self._publish_state(self._status)
        self.events.publish(PlaybackFailed(message=message))

    def _transition(self, target: EngineStatus) -> bool:
        previous = self._status
        if previous == target and target == EngineStatus.LOADING:
            self._publish_state(previous)
            return True
        if not previous.can_transition_to(target):
            logger.debug(LogTemplates.ENGINE_IGNORED, target.value, previous.value)
            return False
        self._status = target
        logger.debug(LogTemplates.ENGINE_TRANSITION, previous.value, target.value)
        self._publish_state(previous)
        return True

    def _publish_state(self, previous: EngineStatus) -> None:
        self.events.publish(PlaybackStateChanged(previous_status=previous, state=self.state))
