"""Mood/genre music player core with an authorizing SoundCloud proxy."""

__version__ = "0.1.0"
