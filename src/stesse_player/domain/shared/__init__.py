"""
Shared Domain Kernel

Contains exceptions, event plumbing and types shared across the player.
"""

from stesse_player.domain.shared.exceptions import (
    AuthError,
    DomainError,
    NotFoundError,
    OutOfRangeError,
    ResolutionError,
    SinkError,
    UntrustedHostError,
)

__all__ = [
    "DomainError",
    "AuthError",
    "ResolutionError",
    "NotFoundError",
    "OutOfRangeError",
    "SinkError",
    "UntrustedHostError",
]
