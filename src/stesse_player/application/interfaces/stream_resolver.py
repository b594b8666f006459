"""Port interface for turning a track into a playable stream URL."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import ResolvedStream, Track


class StreamResolver(ABC):
    """Interface for resolving tracks to authorized, playable URLs."""

    @abstractmethod
    async def resolve(self, track: "Track") -> "ResolvedStream":
        """Resolve a track, raising ResolutionError when it cannot be played."""
        ...
