"""Port interface for the audio playback primitive."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class AudioSinkListener(Protocol):
    """Receiver for events emitted by an audio sink."""

    def on_time_update(self, current_time: float) -> None: ...

    def on_duration_known(self, duration: float) -> None: ...

    def on_ended(self) -> None: ...

    def on_error(self, error: str) -> None: ...


class AudioSink(ABC):
    """Interface for something that plays an audio byte stream at a URL.

    Implementations must report ``on_ended`` exactly once per completed
    playthrough and must never drop ``on_error``. ``on_duration_known`` doubles
    as the readiness signal for the loaded stream.
    """

    @abstractmethod
    def set_listener(self, listener: AudioSinkListener) -> None:
        """Register the receiver for sink events."""
        ...

    @abstractmethod
    async def load(self, url: str) -> None:
        """Begin loading a new stream, replacing the current one."""
        ...

    @abstractmethod
    async def play(self) -> None:
        ...

    @abstractmethod
    async def pause(self) -> None:
        ...

    @abstractmethod
    async def seek(self, seconds: float) -> None:
        ...

    @abstractmethod
    async def set_volume(self, volume: float) -> None:
        """Set output volume in [0, 1]."""
        ...

    @abstractmethod
    async def set_rate(self, rate: float) -> None:
        ...
