import pytest
import pytest_asyncio

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from stesse_player.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def key_value_store(in_memory_database):
    """Create a key-value store backed by the in-memory database."""
    from stesse_player.infrastructure.persistence.repositories.key_value_store import (
        SQLiteKeyValueStore,
    )

    return SQLiteKeyValueStore(in_memory_database)


class MemoryStore:
    """Dict-backed key-value store counting writes."""

    def __init__(self) -> None:
        self.data: dict = {}
        self.writes = 0

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value) -> None:
        self.writes += 1
        self.data[key] = value

    async def delete(self, key) -> bool:
        return self.data.pop(key, None) is not None


@pytest.fixture
def memory_store():
    return MemoryStore()


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def make_track():
    """Factory for tracks with a public (already playable) stream URL."""
    from stesse_player.domain.music.entities import Track
    from stesse_player.domain.music.value_objects import SourceRef

    def _make(track_id: str, **overrides):
        fields = {
            "id": track_id,
            "title": f"Track {track_id}",
            "artist": "Test Artist",
            "album": "Test Album",
            "duration_seconds": 180,
            "source": SourceRef(public_url=f"https://cdn.example.com/{track_id}.mp3"),
        }
        fields.update(overrides)
        return Track(**fields)

    return _make


@pytest.fixture
def sample_tracks(make_track):
    """Five distinct tracks t1..t5."""
    return [make_track(f"t{i}") for i in range(1, 6)]


# ============================================================================
# Audio Sink Fixtures
# ============================================================================


class FakeAudioSink:
    """Records every call; optionally reports readiness as soon as a URL loads."""

    def __init__(self, ready_duration: float | None = 180.0) -> None:
        self.ready_duration = ready_duration
        self.listener = None
        self.calls: list[tuple[str, object]] = []
        self.failing: set[str] = set()

    def set_listener(self, listener) -> None:
        self.listener = listener

    def _record(self, name: str, arg: object = None) -> None:
        self.calls.append((name, arg))
        if name in self.failing:
            raise RuntimeError(f"{name} failed")

    def calls_to(self, name: str) -> list[object]:
        return [arg for call, arg in self.calls if call == name]

    async def load(self, url: str) -> None:
        self._record("load", url)
        if self.ready_duration is not None:
            self.listener.on_duration_known(self.ready_duration)

    async def play(self) -> None:
        self._record("play")

    async def pause(self) -> None:
        self._record("pause")

    async def seek(self, seconds: float) -> None:
        self._record("seek", seconds)

    async def set_volume(self, volume: float) -> None:
        self._record("set_volume", volume)

    async def set_rate(self, rate: float) -> None:
        self._record("set_rate", rate)

    # Simulated sink events

    def report_ready(self, duration: float) -> None:
        self.listener.on_duration_known(duration)

    def report_time(self, seconds: float) -> None:
        self.listener.on_time_update(seconds)

    def report_ended(self) -> None:
        self.listener.on_ended()

    def report_error(self, error: str) -> None:
        self.listener.on_error(error)


@pytest.fixture
def audio_sink():
    """Sink that becomes ready (180s) as soon as a URL is loaded."""
    return FakeAudioSink()


@pytest.fixture
def manual_audio_sink():
    """Sink that only reports readiness when the test says so."""
    return FakeAudioSink(ready_duration=None)


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def soundcloud_settings():
    """Configured SoundCloud credentials pointing at a fake API host."""
    from stesse_player.config.settings import SoundCloudSettings

    return SoundCloudSettings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        api_base="https://api.test",
        token_url="https://api.test/oauth2/token",
    )


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Settings are cached process-wide; every test starts clean."""
    from stesse_player.config.settings import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()
