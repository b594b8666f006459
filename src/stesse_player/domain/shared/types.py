"""Annotated field types shared by the player's pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

from .datetime_utils import to_utc

NonEmptyStr = Annotated[str, Field(min_length=1)]
NonNegativeInt = Annotated[int, Field(ge=0)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]

# Player-facing quantities
TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
DurationSeconds = Annotated[int, Field(ge=0, le=86_400)]
"""Whole seconds, capped at one day."""

PlaylistIndex = Annotated[int, Field(ge=0)]
UnitInterval = Annotated[float, Field(ge=0.0, le=1.0)]
"""Volume level."""

PlaybackRate = Annotated[float, Field(ge=0.25, le=4.0)]

UtcDatetimeField = Annotated[datetime, BeforeValidator(to_utc)]
"""Aware datetime, converted to UTC; naive values are rejected."""
