"""Ports implemented by the infrastructure layer."""

from stesse_player.application.interfaces.audio_sink import AudioSink, AudioSinkListener
from stesse_player.application.interfaces.catalog import Catalog
from stesse_player.application.interfaces.key_value_store import KeyValueStore
from stesse_player.application.interfaces.stream_resolver import StreamResolver

__all__ = [
    "AudioSink",
    "AudioSinkListener",
    "Catalog",
    "KeyValueStore",
    "StreamResolver",
]
