"""SoundCloud stream resolver: track source reference -> proxied playable URL."""

from __future__ import annotations

import logging
import urllib.parse
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from stesse_player.application.interfaces.stream_resolver import StreamResolver
from stesse_player.domain.music.entities import ResolvedStream, Track
from stesse_player.domain.music.stream_policy import (
    NO_PLAYABLE_FORMAT,
    DirectLocator,
    PublicStream,
    TranscodingLocator,
    Unplayable,
    select_stream_source,
)
from stesse_player.domain.shared.constants import SoundCloudApi
from stesse_player.domain.shared.exceptions import ResolutionError
from stesse_player.domain.shared.messages import ErrorMessages, LogTemplates
from stesse_player.infrastructure.soundcloud.client import with_query_param
from stesse_player.infrastructure.soundcloud.models import LOG_URL_TRUNCATE, ResolvedUrlResponse

if TYPE_CHECKING:
    from .client import SoundCloudClient

logger = logging.getLogger(__name__)

UPSTREAM_REJECTED = "upstream_rejected"
TRANSPORT_ERROR = "transport_error"


class SoundCloudStreamResolver(StreamResolver):
    """Turns a ``SourceRef`` into a URL the audio sink can open.

    Authorized upstream URLs are never handed out directly: they are wrapped
    in the backend's ``/api/stream`` passthrough, which adds the bearer
    token server-side.
    """

    def __init__(self, client: SoundCloudClient, *, public_base_url: str) -> None:
        self._client = client
        self._public_base_url = public_base_url.rstrip("/")

    def proxy_url(self, upstream_url: str) -> str:
        return f"{self._public_base_url}/api/stream?url={urllib.parse.quote(upstream_url, safe='')}"

    async def resolve(self, track: Track) -> ResolvedStream:
        source = select_stream_source(track.source)
        logger.debug(LogTemplates.RESOLVE_STARTED, track.id, type(source).__name__)

        match source:
            case PublicStream(url=url):
                logger.debug(LogTemplates.RESOLVE_PUBLIC, track.id)
                return ResolvedStream(track_id=track.id, url=url)
            case DirectLocator(url=url):
                logger.info(LogTemplates.RESOLVE_DIRECT, track.id)
                return ResolvedStream(track_id=track.id, url=self.proxy_url(url))
            case TranscodingLocator(url=url):
                resolved = await self.resolve_transcoding(url, track_id=track.id)
                logger.info(LogTemplates.RESOLVE_SUCCEEDED, track.id)
                return ResolvedStream(track_id=track.id, url=resolved)
            case Unplayable(reason=reason, protocols=protocols):
                if reason == NO_PLAYABLE_FORMAT:
                    logger.warning(LogTemplates.RESOLVE_NO_PROGRESSIVE, track.id, list(protocols))
                    raise ResolutionError(
                        reason,
                        protocols=protocols,
                        message=ErrorMessages.NO_PLAYABLE_FORMAT.format(
                            protocols=", ".join(protocols) or "none"
                        ),
                    )
                raise ResolutionError(reason, message=ErrorMessages.NO_STREAM_SOURCE)

        raise AssertionError(f"unhandled stream source {source!r}")

    async def resolve_transcoding(self, url: str, *, track_id: str | None = None) -> str:
        """Exchange a progressive transcoding locator for the proxied media URL."""
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning(LogTemplates.RESOLVE_FAILED, track_id, e)
            raise ResolutionError(
                TRANSPORT_ERROR, message=ErrorMessages.RESOLUTION_TRANSPORT.format(error=e)
            ) from e

        if not response.is_success:
            logger.warning(
                LogTemplates.RESOLVE_REJECTED, track_id, response.status_code, response.text
            )
            raise ResolutionError(
                UPSTREAM_REJECTED,
                status=response.status_code,
                body=response.text,
                message=ErrorMessages.RESOLUTION_UPSTREAM_REJECTED.format(
                    status=response.status_code
                ),
            )

        try:
            media_url = ResolvedUrlResponse.model_validate(response.json()).url
        except (ValueError, ValidationError) as e:
            raise ResolutionError(
                UPSTREAM_REJECTED,
                status=response.status_code,
                body=response.text,
                message=ErrorMessages.RESOLUTION_MISSING_URL,
            ) from e

        logger.debug(LogTemplates.PROXY_STREAM, media_url[:LOG_URL_TRUNCATE])
        authorized = with_query_param(media_url, SoundCloudApi.CLIENT_ID_PARAM, self._client.client_id)
        return self.proxy_url(authorized)
