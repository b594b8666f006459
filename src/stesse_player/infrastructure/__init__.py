"""Infrastructure adapters: SoundCloud client, persistence and the HTTP proxy."""
