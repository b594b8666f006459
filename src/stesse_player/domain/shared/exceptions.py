"""Base exception classes for domain-level errors."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlsplit


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class AuthError(DomainError):
    """Raised when the credential exchange endpoint rejects the client credentials."""

    def __init__(self, status: int | None, body: str, message: str | None = None) -> None:
        msg = message or f"Credential exchange failed ({status}): {body}"
        super().__init__(msg, code="AUTH_ERROR")
        self.status = status
        self.body = body


class ResolutionError(DomainError):
    """Raised when a track's stream cannot be turned into a playable URL."""

    def __init__(
        self,
        reason: str,
        *,
        status: int | None = None,
        body: str | None = None,
        protocols: Sequence[str] = (),
        message: str | None = None,
    ) -> None:
        msg = message or f"Stream resolution failed: {reason}"
        super().__init__(msg, code="RESOLUTION_ERROR")
        self.reason = reason
        self.status = status
        self.body = body
        self.protocols = tuple(protocols)


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class OutOfRangeError(DomainError):
    """Raised when an index falls outside the playlist."""

    def __init__(self, index: int, size: int, message: str | None = None) -> None:
        msg = message or f"Index {index} is out of range for playlist of {size} tracks"
        super().__init__(msg, code="OUT_OF_RANGE")
        self.index = index
        self.size = size


class SinkError(DomainError):
    """Raised when the audio sink fails to play a resolved URL."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="SINK_ERROR")


class UntrustedHostError(DomainError):
    """Raised when a URL would carry the bearer token to a host outside the allow-list."""

    def __init__(self, url: str, message: str | None = None) -> None:
        host = urlsplit(url).hostname or url
        msg = message or f"Refusing to send credentials to untrusted host '{host}'"
        super().__init__(msg, code="UNTRUSTED_HOST")
        self.url = url
        self.host = host
