"""Stream source selection policy.

Maps a track's opaque source reference to exactly one strategy the
resolver knows how to execute. Pure function, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from stesse_player.domain.music.value_objects import SourceRef


@dataclass(frozen=True)
class PublicStream:
    """Already playable without credentials."""

    url: str


@dataclass(frozen=True)
class DirectLocator:
    """Legacy stream locator; fetched through the authorized proxy."""

    url: str


@dataclass(frozen=True)
class TranscodingLocator:
    """Progressive transcoding whose endpoint yields the final media URL."""

    url: str
    mime_type: str | None = None


@dataclass(frozen=True)
class Unplayable:
    reason: str
    protocols: tuple[str, ...] = ()


StreamSource = PublicStream | DirectLocator | TranscodingLocator | Unplayable

NO_PLAYABLE_FORMAT = "no_playable_format"
NO_STREAM_SOURCE = "no_stream_source"


def select_stream_source(source: SourceRef) -> StreamSource:
    if source.public_url:
        return PublicStream(source.public_url)
    if source.stream_url:
        return DirectLocator(source.stream_url)
    if source.transcodings:
        progressive = next((t for t in source.transcodings if t.is_progressive), None)
        if progressive is None:
            return Unplayable(NO_PLAYABLE_FORMAT, tuple(source.protocols))
        return TranscodingLocator(progressive.url, progressive.mime_type)
    return Unplayable(NO_STREAM_SOURCE)
