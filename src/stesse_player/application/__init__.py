"""
Application Layer

Orchestrates the domain state machines through ports:
- interfaces/: Ports for the audio sink, catalog, resolver and storage
- services/: Playback engine, session persistence and player orchestration
"""
