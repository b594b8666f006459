"""Port interface for fetching genre playlists from the catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class Catalog(ABC):
    """Interface for the genre-driven track catalog."""

    @abstractmethod
    async def fetch_by_genre(self, genre_id: str) -> list["Track"]:
        """Return a bounded, ranked candidate list; never raises for outages."""
        ...
