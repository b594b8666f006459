"""Pydantic models for SoundCloud API payloads.

These are infrastructure-specific models for parsing external API data and
converting it into domain ``Track`` objects. Extra fields are ignored and
before-validators coerce malformed values instead of failing the whole record.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from stesse_player.domain.music.entities import (
    DEFAULT_ALBUM,
    DEFAULT_COVER_URL,
    UNKNOWN_ARTIST,
    Track,
)
from stesse_player.domain.music.value_objects import SourceRef, Transcoding
from stesse_player.domain.shared.types import NonEmptyStr, NonNegativeInt

MAX_TITLE_LENGTH: Final[int] = 500
LOG_URL_TRUNCATE: Final[int] = 100


def _blank_to_none(v: Any) -> str | None:
    if not isinstance(v, str) or not v.strip():
        return None
    return v


class TokenResponse(BaseModel):
    """Successful client-credentials exchange."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: NonEmptyStr
    expires_in: NonNegativeInt = 3600


class ResolvedUrlResponse(BaseModel):
    """Body of a transcoding resolution endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr


class ApiUser(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    username: NonEmptyStr | None = None
    avatar_url: NonEmptyStr | None = None

    @field_validator("username", "avatar_url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        return _blank_to_none(v)


class ApiFormat(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    protocol: str = "unknown"
    mime_type: str | None = None


class ApiTranscoding(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    format: ApiFormat = Field(default_factory=ApiFormat)

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_url(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @field_validator("format", mode="before")
    @classmethod
    def _coerce_format(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}


class ApiMedia(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    transcodings: list[ApiTranscoding] = Field(default_factory=list)

    @field_validator("transcodings", mode="before")
    @classmethod
    def _coerce_transcodings(cls, v: Any) -> list[Any]:
        return v if isinstance(v, list) else []


class ApiTrack(BaseModel):
    """One track record from ``/tracks`` search or ``/tracks/{id}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr
    title: NonEmptyStr = "Unknown Title"
    user: ApiUser = Field(default_factory=ApiUser)
    genre: NonEmptyStr | None = None
    duration_ms: NonNegativeInt = Field(
        default=0, validation_alias=AliasChoices("duration", "duration_ms")
    )
    artwork_url: NonEmptyStr | None = None
    streamable: bool = True
    stream_url: NonEmptyStr | None = None
    media: ApiMedia = Field(default_factory=ApiMedia)
    playback_count: NonNegativeInt = 0
    permalink_url: NonEmptyStr | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        """Numeric ids become strings; anything else is rejected."""
        if isinstance(v, bool) or v is None:
            raise ValueError("track id is required")
        return str(v)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "Unknown Title"
        return v[:MAX_TITLE_LENGTH]

    @field_validator("genre", "artwork_url", "stream_url", "permalink_url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @field_validator("duration_ms", "playback_count", mode="before")
    @classmethod
    def _coerce_count(cls, v: Any) -> int:
        """Coerce to non-negative int; 0 for garbage values."""
        if v is None:
            return 0
        try:
            val = int(v)
            return val if val >= 0 else 0
        except (TypeError, ValueError):
            return 0

    @field_validator("user", "media", mode="before")
    @classmethod
    def _coerce_nested(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @property
    def transcodings(self) -> list[ApiTranscoding]:
        return [t for t in self.media.transcodings if t.url]

    @property
    def is_playable(self) -> bool:
        """Streamable and carrying at least one stream locator."""
        return self.streamable and bool(self.stream_url or self.transcodings)

    def to_domain(self) -> Track:
        return Track(
            id=self.id,
            title=self.title,
            artist=self.user.username or UNKNOWN_ARTIST,
            album=self.genre or DEFAULT_ALBUM,
            duration_seconds=min(self.duration_ms // 1000, 86_400),
            cover_url=self.artwork_url or self.user.avatar_url or DEFAULT_COVER_URL,
            genre_tag=self.genre or "Unknown",
            playback_count=self.playback_count,
            permalink_url=self.permalink_url,
            source=SourceRef(
                stream_url=self.stream_url,
                transcodings=tuple(
                    Transcoding(url=t.url, protocol=t.format.protocol, mime_type=t.format.mime_type)
                    for t in self.transcodings
                ),
            ),
        )


def parse_track_collection(payload: Any) -> list[dict[str, Any]]:
    """Raw records from a search response, paginated (``collection``) or bare list."""
    if isinstance(payload, dict):
        payload = payload.get("collection") or []
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]
