"""OAuth2 client-credentials token cache with single-flight refresh."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from stesse_player.domain.music.entities import Credential
from stesse_player.domain.shared.constants import SoundCloudApi
from stesse_player.domain.shared.exceptions import AuthError
from stesse_player.domain.shared.messages import ErrorMessages, LogTemplates
from stesse_player.infrastructure.soundcloud.models import TokenResponse

if TYPE_CHECKING:
    from ...config.settings import SoundCloudSettings

logger = logging.getLogger(__name__)


class TokenCache:
    """Sole owner of the bearer credential.

    A cached token is returned without I/O while it is more than
    ``token_skew_seconds`` away from expiry. Concurrent callers that find it
    stale share one exchange.
    """

    def __init__(
        self,
        settings: SoundCloudSettings,
        http: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._http = http
        self._clock = clock
        self._skew = settings.token_skew_seconds
        self._credential: Credential | None = None
        self._inflight: asyncio.Task[Credential] | None = None

    @property
    def credential(self) -> Credential | None:
        return self._credential

    @property
    def is_authenticated(self) -> bool:
        credential = self._credential
        return credential is not None and credential.is_fresh(self._clock(), self._skew)

    def invalidate(self) -> None:
        self._credential = None

    async def get_token(self) -> str:
        credential = self._credential
        now = self._clock()
        if credential is not None and credential.is_fresh(now, self._skew):
            logger.debug(LogTemplates.TOKEN_CACHE_HIT, credential.seconds_left(now))
            return credential.token

        if not self._settings.is_configured:
            raise AuthError(None, "", message=ErrorMessages.CLIENT_NOT_CONFIGURED)

        if self._inflight is None:
            self._inflight = asyncio.create_task(self._exchange())
            self._inflight.add_done_callback(self._clear_inflight)
        else:
            logger.debug(LogTemplates.TOKEN_JOIN_INFLIGHT)

        # A cancelled caller must not cancel the exchange the others wait on.
        credential = await asyncio.shield(self._inflight)
        return credential.token

    def _clear_inflight(self, task: asyncio.Task[Credential]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _exchange(self) -> Credential:
        logger.info(LogTemplates.TOKEN_REFRESHING)
        try:
            response = await self._http.post(
                self._settings.token_url,
                data={
                    "grant_type": SoundCloudApi.GRANT_TYPE,
                    "client_id": self._settings.client_id.get_secret_value(),
                    "client_secret": self._settings.client_secret.get_secret_value(),
                },
            )
        except httpx.HTTPError as e:
            logger.error(LogTemplates.TOKEN_UNREACHABLE, e)
            raise AuthError(
                None, str(e), message=ErrorMessages.TOKEN_EXCHANGE_UNREACHABLE.format(error=e)
            ) from e

        if not response.is_success:
            logger.error(LogTemplates.TOKEN_REJECTED, response.status_code, response.text)
            raise AuthError(response.status_code, response.text)

        try:
            payload = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise AuthError(
                response.status_code, response.text, message=ErrorMessages.TOKEN_RESPONSE_INVALID
            ) from e

        credential = Credential(
            token=payload.access_token,
            expires_at=self._clock() + payload.expires_in,
        )
        self._credential = credential
        logger.info(LogTemplates.TOKEN_ACQUIRED, payload.expires_in)
        return credential
