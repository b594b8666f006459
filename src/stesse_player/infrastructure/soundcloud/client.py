"""Authorized HTTP access to the SoundCloud API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from stesse_player.domain.shared.constants import SoundCloudApi
from stesse_player.domain.shared.exceptions import UntrustedHostError

if TYPE_CHECKING:
    from ...config.settings import SoundCloudSettings
    from .token_cache import TokenCache


def build_http_client(settings: SoundCloudSettings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.request_timeout_s, follow_redirects=True)


def with_query_param(url: str, name: str, value: str) -> str:
    """Add or replace one query parameter, keeping the rest of the URL intact."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    query.append((name, value))
    return urlunsplit(parts._replace(query=urlencode(query)))


class SoundCloudClient:
    """Every upstream request carries ``Authorization: OAuth <token>``.

    Token failures surface as ``AuthError``; HTTP failures as the usual
    ``httpx.HTTPStatusError`` / ``httpx.HTTPError`` so callers decide how to
    degrade. Absolute URLs outside the trusted hosts raise
    ``UntrustedHostError`` before any token is fetched.
    """

    def __init__(
        self,
        settings: SoundCloudSettings,
        http: httpx.AsyncClient,
        tokens: TokenCache,
    ) -> None:
        self._settings = settings
        self._http = http
        self.tokens = tokens

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    @property
    def client_id(self) -> str:
        return self._settings.client_id.get_secret_value()

    def checked_url(self, url: str) -> str:
        if not self._settings.is_trusted_url(url):
            raise UntrustedHostError(url)
        return url

    def api_url(self, path: str) -> str:
        if "//" in path:
            return self.checked_url(path)
        return f"{self._settings.api_base.rstrip('/')}/{path.lstrip('/')}"

    async def auth_headers(self) -> dict[str, str]:
        token = await self.tokens.get_token()
        return {"Authorization": f"{SoundCloudApi.AUTH_SCHEME} {token}"}

    async def get(self, path: str, params: Any = None) -> httpx.Response:
        """Authorized GET; the response is returned whatever its status."""
        url = self.api_url(path)
        headers = await self.auth_headers()
        return await self._http.get(url, params=params, headers=headers)

    async def get_json(self, path: str, params: Any = None) -> Any:
        response = await self.get(path, params)
        response.raise_for_status()
        return response.json()

    async def open_stream(self, url: str, extra_headers: dict[str, str] | None = None) -> httpx.Response:
        """Start a streamed GET; the caller must ``aclose()`` the response."""
        url = self.checked_url(url)
        headers = await self.auth_headers()
        if extra_headers:
            headers.update(extra_headers)
        request = self._http.build_request("GET", url, headers=headers)
        return await self._http.send(request, stream=True)
