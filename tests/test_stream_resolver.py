"""Tests for SoundCloud stream resolution."""

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from stesse_player.domain.music.value_objects import SourceRef, Transcoding
from stesse_player.domain.shared.exceptions import ResolutionError, UntrustedHostError
from stesse_player.infrastructure.soundcloud.client import SoundCloudClient, with_query_param
from stesse_player.infrastructure.soundcloud.stream_resolver import SoundCloudStreamResolver
from stesse_player.infrastructure.soundcloud.token_cache import TokenCache

PUBLIC_BASE = "http://localhost:3001"
PROGRESSIVE_URL = "https://api.test/media/123/stream/progressive"
HLS_URL = "https://api.test/media/123/stream/hls"


class FakeSoundCloud:
    """Mock upstream: token endpoint plus a configurable resolution endpoint."""

    def __init__(self, status: int = 200, body: dict | None = None) -> None:
        self.status = status
        self.body = body if body is not None else {"url": "https://cf-media.test/abc.mp3?sig=1"}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth2/token":
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        if self.status != 200:
            return httpx.Response(self.status, text="forbidden")
        return httpx.Response(200, json=self.body)

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path != "/oauth2/token"]


def _build_resolver(settings, upstream: FakeSoundCloud) -> SoundCloudStreamResolver:
    http = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    client = SoundCloudClient(settings, http, TokenCache(settings, http))
    return SoundCloudStreamResolver(client, public_base_url=PUBLIC_BASE)


def _proxied_target(url: str) -> str:
    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == f"{PUBLIC_BASE}/api/stream"
    return parse_qs(parts.query)["url"][0]


@pytest.fixture
def upstream():
    return FakeSoundCloud()


@pytest.fixture
def resolver(soundcloud_settings, upstream):
    return _build_resolver(soundcloud_settings, upstream)


class TestResolve:
    """Tests for mapping a track source to a playable URL."""

    @pytest.mark.asyncio
    async def test_public_url_returned_unchanged(self, resolver, upstream, make_track):
        track = make_track("t1")
        stream = await resolver.resolve(track)
        assert stream.track_id == "t1"
        assert stream.url == "https://cdn.example.com/t1.mp3"
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_legacy_stream_url_is_proxied(self, resolver, upstream, make_track):
        legacy = "https://api.test/tracks/1/stream"
        track = make_track("t1", source=SourceRef(stream_url=legacy))

        stream = await resolver.resolve(track)

        assert _proxied_target(stream.url) == legacy
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_progressive_transcoding_resolved(self, resolver, upstream, make_track):
        track = make_track(
            "t1",
            source=SourceRef(
                transcodings=(
                    Transcoding(url=HLS_URL, protocol="hls"),
                    Transcoding(url=PROGRESSIVE_URL, protocol="progressive"),
                )
            ),
        )

        stream = await resolver.resolve(track)

        target = urlsplit(_proxied_target(stream.url))
        assert target.netloc == "cf-media.test"
        query = parse_qs(target.query)
        assert query["client_id"] == ["test-client-id"]
        assert query["sig"] == ["1"]

        (request,) = upstream.api_requests
        assert str(request.url) == PROGRESSIVE_URL
        assert request.headers["Authorization"] == "OAuth tok"

    @pytest.mark.asyncio
    async def test_hls_only_has_no_playable_format(self, resolver, upstream, make_track):
        track = make_track(
            "t1",
            source=SourceRef(
                transcodings=(
                    Transcoding(url=HLS_URL, protocol="hls"),
                    Transcoding(url=HLS_URL + "/opus", protocol="hls"),
                )
            ),
        )

        with pytest.raises(ResolutionError) as exc_info:
            await resolver.resolve(track)

        assert exc_info.value.reason == "no_playable_format"
        assert exc_info.value.protocols == ("hls", "hls")
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_track_without_source(self, resolver, make_track):
        track = make_track("t1", source=SourceRef())
        with pytest.raises(ResolutionError) as exc_info:
            await resolver.resolve(track)
        assert exc_info.value.reason == "no_stream_source"


class TestResolveTranscoding:
    """Tests for the upstream resolution call."""

    @pytest.mark.asyncio
    async def test_upstream_rejection_carries_status_and_body(self, soundcloud_settings):
        resolver = _build_resolver(soundcloud_settings, FakeSoundCloud(status=403))

        with pytest.raises(ResolutionError) as exc_info:
            await resolver.resolve_transcoding(PROGRESSIVE_URL)

        assert exc_info.value.reason == "upstream_rejected"
        assert exc_info.value.status == 403
        assert exc_info.value.body == "forbidden"

    @pytest.mark.asyncio
    async def test_missing_url_in_body(self, soundcloud_settings):
        resolver = _build_resolver(soundcloud_settings, FakeSoundCloud(body={"nope": 1}))

        with pytest.raises(ResolutionError) as exc_info:
            await resolver.resolve_transcoding(PROGRESSIVE_URL)
        assert exc_info.value.reason == "upstream_rejected"

    @pytest.mark.asyncio
    async def test_untrusted_locator_never_fetched(self, soundcloud_settings):
        upstream = FakeSoundCloud()
        resolver = _build_resolver(soundcloud_settings, upstream)

        with pytest.raises(UntrustedHostError):
            await resolver.resolve_transcoding("https://evil.example/stream/progressive")

        assert upstream.requests == []

    def test_proxy_url_escapes_target(self, resolver):
        url = resolver.proxy_url("https://a.test/x?y=1&z=2")
        assert url == f"{PUBLIC_BASE}/api/stream?url=https%3A%2F%2Fa.test%2Fx%3Fy%3D1%26z%3D2"


class TestWithQueryParam:
    """Tests for query parameter replacement."""

    def test_adds_parameter(self):
        assert with_query_param("https://a.test/x", "client_id", "c") == "https://a.test/x?client_id=c"

    def test_replaces_existing_parameter(self):
        url = with_query_param("https://a.test/x?client_id=old&k=v", "client_id", "new")
        assert parse_qs(urlsplit(url).query) == {"k": ["v"], "client_id": ["new"]}
