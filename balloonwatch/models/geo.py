"""Geographic value types shared across the tracking core."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class Position(GeoPoint):
    """A balloon fix at a point in time."""

    alt: float = Field(default=0.0, description="Altitude in kilometers")
    timestamp: datetime = Field(..., description="Observation time (UTC)")


class MatchedPosition(Position):
    """A historical position threaded to a balloon by nearest-point matching."""

    distance: float = Field(..., ge=0, description="Planar distance to the target in degrees")
    hour_offset: int = Field(..., ge=0, description="Hours before now of the source snapshot")


class Balloon(BaseModel):
    """A balloon observed in one snapshot."""

    id: str = Field(..., description="Synthetic identifier, unique within a snapshot")
    position: Position


class Snapshot(BaseModel):
    """All raw balloon triples reported for one historical hour."""

    hour_offset: int = Field(..., ge=0, description="Hours before now")
    entries: list[Any] = Field(
        default_factory=list, description="Raw [lon, lat, alt] triples, unvalidated"
    )


class Bounds(BaseModel):
    """Viewport bounds as south-west and north-east corners."""

    south_west: GeoPoint
    north_east: GeoPoint


__all__ = ["Balloon", "Bounds", "GeoPoint", "MatchedPosition", "Position", "Snapshot"]
