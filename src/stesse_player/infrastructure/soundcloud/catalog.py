"""Genre catalog backed by SoundCloud track search, with a sample-data fallback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError

from stesse_player.application.interfaces.catalog import Catalog
from stesse_player.domain.music.entities import Track
from stesse_player.domain.shared.constants import SoundCloudApi
from stesse_player.domain.shared.exceptions import AuthError
from stesse_player.domain.shared.messages import ErrorMessages, LogTemplates
from stesse_player.infrastructure.soundcloud.models import ApiTrack, parse_track_collection
from stesse_player.infrastructure.soundcloud.sample_data import FALLBACK_GENRE, sample_tracks

if TYPE_CHECKING:
    from .client import SoundCloudClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_TRACKS: Final[int] = 50
DEFAULT_PER_QUERY_LIMIT: Final[int] = 20

GENRE_QUERIES: Final[dict[str, tuple[str, ...]]] = {
    "lofi": ("lofi hip hop beats", "chillhop study", "lofi beats to study"),
    "classical": ("classical piano study", "peaceful piano", "classical focus music"),
    "ambient": ("ambient study music", "ambient electronic focus", "atmospheric concentration"),
    "jazz": ("smooth jazz instrumental", "jazz for studying", "bossa nova chill"),
    "bass": ("bass boosted study", "deep bass concentration"),
    "chill-trap": ("chill trap beats", "melodic trap study"),
}


def queries_for(genre_id: str) -> tuple[str, ...]:
    queries = GENRE_QUERIES.get(genre_id)
    if queries is None:
        logger.info(LogTemplates.CATALOG_UNKNOWN_GENRE, genre_id)
        return GENRE_QUERIES[FALLBACK_GENRE]
    return queries


def merge_ranked(batches: Iterable[Iterable[ApiTrack]], limit: int) -> list[Track]:
    """Playable records, first occurrence per id, most played first, capped at ``limit``.

    ``sorted`` is stable, so equal play counts keep first-seen order.
    """
    unique: dict[str, ApiTrack] = {}
    for batch in batches:
        for record in batch:
            if record.is_playable:
                unique.setdefault(record.id, record)
    ranked = sorted(unique.values(), key=lambda r: r.playback_count, reverse=True)
    return [record.to_domain() for record in ranked[:limit]]


class SoundCloudCatalog(Catalog):
    """Live genre playlists; degrades to sample data instead of raising."""

    def __init__(
        self,
        client: SoundCloudClient,
        *,
        max_tracks: int = DEFAULT_MAX_TRACKS,
        per_query_limit: int = DEFAULT_PER_QUERY_LIMIT,
    ) -> None:
        self._client = client
        self._max_tracks = max_tracks
        self._per_query_limit = per_query_limit

    def is_live_available(self) -> bool:
        return self._client.is_configured and self._client.tokens.is_authenticated

    async def fetch_by_genre(self, genre_id: str) -> list[Track]:
        if not self._client.is_configured:
            return self._fallback(genre_id, ErrorMessages.CLIENT_NOT_CONFIGURED)

        # One exchange up front; every query then reuses the cached token.
        try:
            await self._client.tokens.get_token()
        except AuthError as e:
            return self._fallback(genre_id, e.message)

        queries = queries_for(genre_id)
        logger.info(LogTemplates.CATALOG_FETCHING, genre_id, len(queries))
        results = await asyncio.gather(*(self._search(query) for query in queries))

        batches = [batch for batch in results if batch is not None]
        if not batches:
            return self._fallback(genre_id, "every search query failed")

        tracks = merge_ranked(batches, self._max_tracks)
        if not tracks:
            return self._fallback(genre_id, "no playable tracks found")

        logger.info(
            LogTemplates.CATALOG_FETCHED, len(tracks), genre_id, sum(len(b) for b in batches)
        )
        return tracks

    async def fetch_track(self, track_id: str) -> Track:
        """Look up one track; raises ``AuthError`` or ``httpx.HTTPError``."""
        payload = await self._client.get_json(SoundCloudApi.TRACK_PATH.format(track_id=track_id))
        return ApiTrack.model_validate(payload).to_domain()

    async def _search(self, query: str) -> list[ApiTrack] | None:
        """Records for one query, or None when the query failed."""
        params = {
            "q": query,
            "limit": self._per_query_limit,
            "linked_partitioning": SoundCloudApi.LINKED_PARTITIONING,
        }
        try:
            payload = await self._client.get_json(SoundCloudApi.TRACKS_PATH, params)
        except (AuthError, httpx.HTTPError, ValueError) as e:
            logger.warning(LogTemplates.CATALOG_QUERY_FAILED, query, e)
            return None

        records: list[ApiTrack] = []
        for raw in parse_track_collection(payload):
            try:
                records.append(ApiTrack.model_validate(raw))
            except ValidationError:
                logger.debug(LogTemplates.CATALOG_RECORD_MALFORMED, query)
        return records

    def _fallback(self, genre_id: str, reason: str) -> list[Track]:
        logger.warning(LogTemplates.CATALOG_FALLBACK, genre_id, reason)
        return sample_tracks(genre_id)
