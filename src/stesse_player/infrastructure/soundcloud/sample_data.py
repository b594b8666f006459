"""Fixed sample catalog served when the live catalog is unavailable."""

from __future__ import annotations

from typing import Final

from stesse_player.domain.music.entities import Track
from stesse_player.domain.music.value_objects import SourceRef

FALLBACK_GENRE: Final[str] = "lofi"

_COVER_COLORS: Final[dict[str, str]] = {
    "lofi": "667eea",
    "classical": "8b5cf6",
    "ambient": "06b6d4",
    "jazz": "f59e0b",
    "bass": "ef4444",
    "chill-trap": "a855f7",
}

# (id, title, artist, album, duration, genre tag, play count, cover text, slug)
_SAMPLES: Final[dict[str, tuple[tuple[str, str, str, str, int, str, int, str, str], ...]]] = {
    "lofi": (
        ("lofi-1", "Chill Lo-Fi Beats", "ChillHop Music", "Lo-Fi Collection", 180, "Lo-Fi Hip Hop", 125000, "Lo-Fi", "lofi1"),
        ("lofi-2", "Study Session", "Lofi Girl", "Study Vibes", 210, "Lo-Fi Hip Hop", 98000, "Study", "lofi2"),
        ("lofi-3", "Rainy Day Focus", "Dreamscape", "Rainy Moods", 195, "Lo-Fi Hip Hop", 87000, "Rain", "lofi3"),
    ),
    "classical": (
        ("classical-1", "Moonlight Sonata", "Classical Piano", "Piano Classics", 240, "Classical", 156000, "Classical", "classical1"),
        ("classical-2", "Peaceful Piano", "Relaxing Piano", "Study Classical", 220, "Classical", 134000, "Piano", "classical2"),
        ("classical-3", "Morning Meditation", "Zen Orchestra", "Calm Morning", 200, "Classical", 112000, "Zen", "classical3"),
    ),
    "ambient": (
        ("ambient-1", "Deep Space", "Ambient Waves", "Space Journey", 300, "Ambient", 89000, "Space", "ambient1"),
        ("ambient-2", "Ocean Drift", "Atmospheric Sounds", "Water Elements", 280, "Ambient", 76000, "Ocean", "ambient2"),
        ("ambient-3", "Forest Atmosphere", "Nature Sounds", "Earth Tones", 260, "Ambient", 71000, "Forest", "ambient3"),
    ),
    "jazz": (
        ("jazz-1", "Smooth Jazz Evening", "Jazz Collective", "Evening Moods", 250, "Jazz", 102000, "Jazz", "jazz1"),
        ("jazz-2", "Coffee Shop Vibes", "Cafe Jazz", "Coffeehouse", 230, "Jazz", 95000, "Cafe", "jazz2"),
        ("jazz-3", "Bossa Nova Sunset", "Latin Jazz", "Bossa Collection", 215, "Jazz", 88000, "Bossa", "jazz3"),
    ),
    "bass": (
        ("bass-1", "Deep Bass Focus", "BassBoost", "Heavy Bass", 190, "Bass Boosted", 145000, "Bass", "bass1"),
        ("bass-2", "Sub Frequencies", "Low End Theory", "Bass Collection", 205, "Bass Boosted", 128000, "Sub", "bass2"),
        ("bass-3", "Bass Drop Study", "Heavy Hitters", "Study Bass", 185, "Bass Boosted", 115000, "Drop", "bass3"),
    ),
    "chill-trap": (
        ("trap-1", "Melodic Trap", "TrapBeats", "Chill Trap Mix", 175, "Chill Trap", 167000, "Trap", "trap1"),
        ("trap-2", "Soft 808s", "Chill Producer", "Trap Study", 165, "Chill Trap", 142000, "808", "trap2"),
        ("trap-3", "Ambient Trap", "Trap Vibes", "Atmospheric Trap", 180, "Chill Trap", 135000, "Ambient", "trap3"),
    ),
}


def sample_genres() -> tuple[str, ...]:
    return tuple(_SAMPLES)


def sample_tracks(genre_id: str) -> list[Track]:
    """Sample tracks for a genre; unknown genres get the lofi set."""
    genre = genre_id if genre_id in _SAMPLES else FALLBACK_GENRE
    color = _COVER_COLORS[genre]
    return [
        Track(
            id=track_id,
            title=title,
            artist=artist,
            album=album,
            duration_seconds=duration,
            cover_url=f"https://via.placeholder.com/400/{color}/ffffff?text={cover_text}",
            genre_tag=genre_tag,
            playback_count=plays,
            permalink_url=f"https://soundcloud.com/mock/{slug}",
            source=SourceRef(public_url=f"https://example.com/{slug}.mp3"),
        )
        for track_id, title, artist, album, duration, genre_tag, plays, cover_text, slug in _SAMPLES[genre]
    ]
