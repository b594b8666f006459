"""
Domain Layer

Contains pure player logic organized by bounded contexts:
- shared/: Cross-cutting exceptions, events, types and messages
- music/: Track model, playlist state machine and stream selection policy
"""

from stesse_player.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
