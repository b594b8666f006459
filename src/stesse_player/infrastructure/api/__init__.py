"""HTTP proxy exposing health, stream resolution, streaming and catalog routes."""

from stesse_player.infrastructure.api.app import create_app

__all__ = ["create_app"]
