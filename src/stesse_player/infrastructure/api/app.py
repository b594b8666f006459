"""Backend proxy: owns the bearer credential so the browser never sees it."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Final

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import ValidationError

from stesse_player.domain.music.entities import Track
from stesse_player.domain.music.stream_policy import NO_PLAYABLE_FORMAT, NO_STREAM_SOURCE
from stesse_player.domain.shared.constants import StreamHeaders
from stesse_player.domain.shared.datetime_utils import from_epoch, iso_z
from stesse_player.domain.shared.exceptions import AuthError, ResolutionError, UntrustedHostError
from stesse_player.domain.shared.messages import ErrorMessages, LogTemplates
from stesse_player.infrastructure.soundcloud.models import LOG_URL_TRUNCATE

if TYPE_CHECKING:
    from ...config.container import Container

logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE: Final[int] = 64 * 1024
FORWARDED_STREAM_HEADERS: Final[tuple[str, ...]] = ("content-range",)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _auth_error(e: AuthError) -> JSONResponse:
    return _error(e.status or 502, e.message)


def _untrusted_host(e: UntrustedHostError) -> JSONResponse:
    logger.warning(LogTemplates.PROXY_UNTRUSTED_HOST, e.host)
    return _error(400, e.message)


def _resolution_error(e: ResolutionError) -> JSONResponse:
    if e.status is not None:
        return _error(e.status, e.message)
    if e.reason in (NO_PLAYABLE_FORMAT, NO_STREAM_SOURCE):
        return _error(400, e.message)
    return _error(502, e.message)


def track_payload(track: Track) -> dict[str, Any]:
    payload = track.model_dump(mode="json", exclude={"source"})
    payload["audio_url"] = track.audio_url
    payload["duration_formatted"] = track.duration_formatted
    return payload


def create_app(container: Container) -> FastAPI:
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await container.shutdown()

    app = FastAPI(title="stesse-player proxy", lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.proxy.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health() -> dict[str, Any]:
        tokens = container.token_cache
        credential = tokens.credential
        return {
            "status": "ok",
            "authenticated": tokens.is_authenticated,
            "tokenExpiry": (
                iso_z(from_epoch(credential.expires_at - settings.soundcloud.token_skew_seconds))
                if credential
                else None
            ),
        }

    @app.get("/api/soundcloud-resolve", response_model=None)
    async def soundcloud_resolve(
        url: str | None = None,
        track_id: str | None = Query(default=None, alias="trackId"),
    ) -> dict[str, str] | JSONResponse:
        logger.info(LogTemplates.PROXY_RESOLVE, url, track_id)
        resolver = container.stream_resolver
        try:
            if url:
                return {"url": await resolver.resolve_transcoding(url)}
            if track_id:
                track = await container.catalog.fetch_track(track_id)
                stream = await resolver.resolve(track)
                return {"url": stream.url}
        except ResolutionError as e:
            return _resolution_error(e)
        except UntrustedHostError as e:
            return _untrusted_host(e)
        except AuthError as e:
            return _auth_error(e)
        except httpx.HTTPStatusError as e:
            return _error(e.response.status_code, e.response.text)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.warning(LogTemplates.RESOLVE_FAILED, track_id, e)
            return _error(502, str(e))

        return _error(400, ErrorMessages.RESOLVE_PARAMS_REQUIRED)

    @app.get("/api/stream", response_model=None)
    async def stream(
        request: Request, url: str | None = None
    ) -> StreamingResponse | JSONResponse | PlainTextResponse:
        if not url:
            return _error(400, ErrorMessages.STREAM_URL_REQUIRED)

        logger.info(LogTemplates.PROXY_STREAM, url[:LOG_URL_TRUNCATE])
        extra_headers = {"Range": request.headers["range"]} if "range" in request.headers else None
        try:
            upstream = await container.soundcloud_client.open_stream(url, extra_headers)
        except UntrustedHostError as e:
            return _untrusted_host(e)
        except AuthError as e:
            return _auth_error(e)
        except httpx.HTTPError as e:
            logger.warning(LogTemplates.PROXY_STREAM_ERROR, e)
            return PlainTextResponse("Stream error", status_code=502)

        if not upstream.is_success:
            logger.warning(LogTemplates.PROXY_STREAM_FAILED, upstream.status_code)
            await upstream.aclose()
            return PlainTextResponse(
                ErrorMessages.STREAM_NOT_AVAILABLE, status_code=upstream.status_code
            )

        # Content-Length is never forwarded; the body goes out chunked.
        headers = {
            "Accept-Ranges": StreamHeaders.ACCEPT_RANGES,
            "Cache-Control": StreamHeaders.CACHE_CONTROL,
        }
        for name in FORWARDED_STREAM_HEADERS:
            if name in upstream.headers:
                headers[name.title()] = upstream.headers[name]

        async def body() -> AsyncIterator[bytes]:
            try:
                async for chunk in upstream.aiter_bytes(chunk_size=STREAM_CHUNK_SIZE):
                    yield chunk
            except httpx.HTTPError as e:
                logger.warning(LogTemplates.PROXY_STREAM_ERROR, e)
            finally:
                await upstream.aclose()

        return StreamingResponse(
            body(),
            status_code=upstream.status_code,
            media_type=upstream.headers.get("content-type", StreamHeaders.DEFAULT_CONTENT_TYPE),
            headers=headers,
        )

    @app.get("/api/catalog/{genre}")
    async def catalog(genre: str) -> dict[str, Any]:
        tracks = await container.catalog.fetch_by_genre(genre)
        return {
            "genre": genre,
            "live": container.catalog.is_live_available(),
            "tracks": [track_payload(t) for t in tracks],
        }

    @app.get("/api/soundcloud/{path:path}", response_model=None)
    async def soundcloud_proxy(path: str, request: Request) -> JSONResponse:
        if "://" in path or path.startswith("/"):
            return _error(400, ErrorMessages.INVALID_PROXY_PATH)

        logger.info(LogTemplates.PROXY_REQUEST, path)
        try:
            response = await container.soundcloud_client.get(
                path, params=list(request.query_params.multi_items())
            )
        except UntrustedHostError as e:
            return _untrusted_host(e)
        except AuthError as e:
            return _auth_error(e)
        except httpx.HTTPError as e:
            return _error(502, str(e))

        if not response.is_success:
            return _error(response.status_code, response.text)
        try:
            return JSONResponse(content=response.json())
        except ValueError:
            return _error(502, ErrorMessages.UPSTREAM_NOT_JSON)

    return app
