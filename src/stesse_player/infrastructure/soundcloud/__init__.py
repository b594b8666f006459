"""SoundCloud adapters: credentials, catalog search and stream resolution."""

from stesse_player.infrastructure.soundcloud.catalog import GENRE_QUERIES, SoundCloudCatalog
from stesse_player.infrastructure.soundcloud.client import SoundCloudClient, build_http_client
from stesse_player.infrastructure.soundcloud.stream_resolver import SoundCloudStreamResolver
from stesse_player.infrastructure.soundcloud.token_cache import TokenCache

__all__ = [
    "GENRE_QUERIES",
    "SoundCloudCatalog",
    "SoundCloudClient",
    "SoundCloudStreamResolver",
    "TokenCache",
    "build_http_client",
]
