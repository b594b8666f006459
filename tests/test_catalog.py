"""Tests for the genre catalog, its payload models and the sample fallback."""

import logging

import httpx
import pytest

from stesse_player.config.settings import SoundCloudSettings
from stesse_player.infrastructure.soundcloud.catalog import (
    GENRE_QUERIES,
    SoundCloudCatalog,
    merge_ranked,
    queries_for,
)
from stesse_player.infrastructure.soundcloud.client import SoundCloudClient
from stesse_player.infrastructure.soundcloud.models import ApiTrack, parse_track_collection
from stesse_player.infrastructure.soundcloud.sample_data import sample_genres, sample_tracks
from stesse_player.infrastructure.soundcloud.token_cache import TokenCache


def _record(track_id, plays=0, **overrides):
    record = {
        "id": track_id,
        "title": f"Song {track_id}",
        "user": {"username": "Artist"},
        "duration": 200_000,
        "playback_count": plays,
        "streamable": True,
        "media": {
            "transcodings": [
                {"url": f"https://api.test/media/{track_id}/progressive", "format": {"protocol": "progressive"}}
            ]
        },
    }
    record.update(overrides)
    return record


def _api(*records):
    return [ApiTrack.model_validate(r) for r in records]


def _build_catalog(settings, handler) -> tuple[SoundCloudCatalog, SoundCloudClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = SoundCloudClient(settings, http, TokenCache(settings, http))
    return SoundCloudCatalog(client, max_tracks=50, per_query_limit=20), client


class SearchEndpoint:
    """Mock API answering each search query with a fixed collection."""

    def __init__(self, results: dict[str, list[dict] | int]) -> None:
        self.results = results
        self.queries: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth2/token":
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        query = request.url.params["q"]
        self.queries.append(query)
        result = self.results.get(query, [])
        if isinstance(result, int):
            return httpx.Response(result, text="error")
        return httpx.Response(200, json={"collection": result})


class TestApiTrack:
    """Tests for parsing upstream track records."""

    def test_to_domain_maps_fields(self):
        track = ApiTrack.model_validate(
            _record(
                42,
                plays=10,
                genre="Lo-Fi",
                artwork_url="https://img.test/a.jpg",
                permalink_url="https://soundcloud.test/a/b",
            )
        ).to_domain()

        assert track.id == "42"
        assert track.artist == "Artist"
        assert track.album == "Lo-Fi"
        assert track.duration_seconds == 200
        assert track.cover_url == "https://img.test/a.jpg"
        assert track.playback_count == 10
        assert track.source.transcodings[0].is_progressive is True

    def test_missing_fields_get_defaults(self):
        track = ApiTrack.model_validate({"id": 7, "stream_url": "https://api.test/s"}).to_domain()
        assert track.title == "Unknown Title"
        assert track.artist == "Unknown Artist"
        assert track.album == "SoundCloud"
        assert track.cover_url == "https://via.placeholder.com/400"

    def test_avatar_used_when_no_artwork(self):
        record = _record(1, user={"username": "A", "avatar_url": "https://img.test/avatar.jpg"})
        assert ApiTrack.model_validate(record).to_domain().cover_url == "https://img.test/avatar.jpg"

    def test_garbage_counts_coerced(self):
        record = ApiTrack.model_validate(_record(1, playback_count="many", duration=-5))
        assert record.playback_count == 0
        assert record.duration_ms == 0

    def test_unstreamable_record_not_playable(self):
        assert ApiTrack.model_validate(_record(1, streamable=False)).is_playable is False

    def test_record_without_locators_not_playable(self):
        assert ApiTrack.model_validate(_record(1, media={})).is_playable is False

    def test_parse_collection_accepts_both_shapes(self):
        assert parse_track_collection({"collection": [{"id": 1}]}) == [{"id": 1}]
        assert parse_track_collection([{"id": 1}, "junk"]) == [{"id": 1}]
        assert parse_track_collection("junk") == []


class TestMergeRanked:
    """Tests for combining per-query results."""

    def test_sorted_by_play_count_descending(self):
        tracks = merge_ranked([_api(_record(1, 5), _record(2, 50)), _api(_record(3, 20))], 50)
        assert [t.id for t in tracks] == ["2", "3", "1"]

    def test_duplicates_keep_first_occurrence(self):
        first = _record(1, 5, title="First")
        again = _record(1, 99, title="Again")
        tracks = merge_ranked([_api(first), _api(again)], 50)
        assert len(tracks) == 1
        assert tracks[0].title == "First"

    def test_unplayable_records_dropped(self):
        tracks = merge_ranked([_api(_record(1, 5), _record(2, 50, streamable=False))], 50)
        assert [t.id for t in tracks] == ["1"]

    def test_capped_at_limit(self):
        batch = _api(*(_record(i, i) for i in range(10)))
        assert len(merge_ranked([batch], 3)) == 3

    def test_ties_keep_first_seen_order(self):
        tracks = merge_ranked([_api(_record("a", 1), _record("b", 1), _record("c", 1))], 50)
        assert [t.id for t in tracks] == ["a", "b", "c"]


class TestGenreQueries:
    """Tests for the genre-to-query table."""

    def test_known_genre(self):
        assert queries_for("jazz") == GENRE_QUERIES["jazz"]

    def test_unknown_genre_uses_lofi(self):
        assert queries_for("polka") == GENRE_QUERIES["lofi"]

    def test_every_genre_has_samples(self):
        assert set(GENRE_QUERIES) == set(sample_genres())


class TestSampleData:
    """Tests for the built-in sample catalog."""

    @pytest.mark.parametrize("genre", ["lofi", "classical", "ambient", "jazz", "bass", "chill-trap"])
    def test_three_playable_tracks_per_genre(self, genre):
        tracks = sample_tracks(genre)
        assert len(tracks) == 3
        assert all(t.audio_url for t in tracks)
        assert all(t.source.public_url for t in tracks)

    def test_unknown_genre_gets_lofi(self):
        assert [t.id for t in sample_tracks("polka")] == [t.id for t in sample_tracks("lofi")]


class TestFetchByGenre:
    """Tests for live fetching and fallback."""

    @pytest.mark.asyncio
    async def test_live_results_merged(self, soundcloud_settings):
        queries = GENRE_QUERIES["lofi"]
        endpoint = SearchEndpoint(
            {
                queries[0]: [_record(1, 10), _record(2, 30)],
                queries[1]: [_record(2, 30), _record(3, 20)],
                queries[2]: [],
            }
        )
        catalog, _ = _build_catalog(soundcloud_settings, endpoint)

        tracks = await catalog.fetch_by_genre("lofi")

        assert [t.id for t in tracks] == ["2", "3", "1"]
        assert sorted(endpoint.queries) == sorted(queries)
        assert catalog.is_live_available() is True

    @pytest.mark.asyncio
    async def test_failed_query_skipped(self, soundcloud_settings):
        queries = GENRE_QUERIES["jazz"]
        endpoint = SearchEndpoint({queries[0]: 500, queries[1]: [_record(9, 1)]})
        catalog, _ = _build_catalog(soundcloud_settings, endpoint)

        tracks = await catalog.fetch_by_genre("jazz")

        assert [t.id for t in tracks] == ["9"]

    @pytest.mark.asyncio
    async def test_malformed_record_skipped_and_logged(self, soundcloud_settings, caplog):
        queries = GENRE_QUERIES["jazz"]
        endpoint = SearchEndpoint({queries[0]: [{"title": "no id"}, _record(4, 5)]})
        catalog, _ = _build_catalog(soundcloud_settings, endpoint)

        with caplog.at_level(logging.DEBUG):
            tracks = await catalog.fetch_by_genre("jazz")

        assert [t.id for t in tracks] == ["4"]
        assert any("Skipping malformed track record" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_unreachable_upstream_falls_back_to_samples(self, soundcloud_settings):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        catalog, _ = _build_catalog(soundcloud_settings, refuse)

        tracks = await catalog.fetch_by_genre("lofi")

        assert len(tracks) == 3
        assert all(t.audio_url for t in tracks)
        assert catalog.is_live_available() is False

    @pytest.mark.asyncio
    async def test_every_query_failing_falls_back(self, soundcloud_settings):
        endpoint = SearchEndpoint({q: 503 for q in GENRE_QUERIES["ambient"]})
        catalog, _ = _build_catalog(soundcloud_settings, endpoint)

        tracks = await catalog.fetch_by_genre("ambient")

        assert [t.id for t in tracks] == [t.id for t in sample_tracks("ambient")]

    @pytest.mark.asyncio
    async def test_no_playable_results_falls_back(self, soundcloud_settings):
        endpoint = SearchEndpoint({q: [_record(1, streamable=False)] for q in GENRE_QUERIES["bass"]})
        catalog, _ = _build_catalog(soundcloud_settings, endpoint)

        tracks = await catalog.fetch_by_genre("bass")

        assert [t.id for t in tracks] == [t.id for t in sample_tracks("bass")]

    @pytest.mark.asyncio
    async def test_unconfigured_client_uses_samples_without_io(self):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        catalog, _ = _build_catalog(SoundCloudSettings(), handler)

        tracks = await catalog.fetch_by_genre("classical")

        assert [t.id for t in tracks] == ["classical-1", "classical-2", "classical-3"]
        assert calls == []

    @pytest.mark.asyncio
    async def test_search_parameters(self, soundcloud_settings):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/oauth2/token":
                return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
            seen.append(request)
            return httpx.Response(200, json={"collection": []})

        catalog, _ = _build_catalog(soundcloud_settings, handler)
        await catalog.fetch_by_genre("chill-trap")

        request = seen[0]
        assert request.url.path == "/tracks"
        assert request.url.params["limit"] == "20"
        assert request.url.params["linked_partitioning"] == "true"
        assert request.headers["Authorization"] == "OAuth tok"
