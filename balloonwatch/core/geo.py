"""Planar geometry helpers for matching, prediction and viewport fitting.

Distances here are Euclidean in degree space, not great-circle. They are only
used to rank nearby candidates over a few degrees, where that is good enough.
"""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

from balloonwatch.models.geo import Bounds, GeoPoint

T = TypeVar("T")

DEFAULT_BOUNDS_PADDING_DEG = 1.0


def squared_planar_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Return the squared lat/lon distance between two points in degrees."""

    d_lat = a.lat - b.lat
    d_lon = a.lon - b.lon
    return d_lat * d_lat + d_lon * d_lon


def planar_distance(a: GeoPoint, b: GeoPoint) -> float:
    return math.sqrt(squared_planar_distance(a, b))


def normalize(lat: float, lon: float) -> tuple[float, float]:
    """Clamp latitude to [-90, 90] and wrap longitude into [-180, 180]."""

    lat = max(-90.0, min(90.0, lat))
    if lon < -180.0 or lon > 180.0:
        lon = ((lon + 180.0) % 360.0) - 180.0
    return lat, lon


def bounds_of(
    points: Sequence[GeoPoint], padding_deg: float = DEFAULT_BOUNDS_PADDING_DEG
) -> Bounds | None:
    """Return padded bounds containing every point, or None for no points."""

    if not points:
        return None

    south = min(p.lat for p in points) - padding_deg
    north = max(p.lat for p in points) + padding_deg
    west = min(p.lon for p in points) - padding_deg
    east = max(p.lon for p in points) + padding_deg

    return Bounds(
        south_west=GeoPoint(lat=max(south, -90.0), lon=max(west, -180.0)),
        north_east=GeoPoint(lat=min(north, 90.0), lon=min(east, 180.0)),
    )


def path_portion(points: Sequence[T], fraction: float) -> list[T]:
    """Return the prefix of a path revealed after ``fraction`` of an animation.

    ``fraction`` is clamped to [0, 1]; the prefix holds ``ceil(fraction * n)``
    points so a path starts drawing as soon as any time has elapsed.
    """

    fraction = max(0.0, min(1.0, fraction))
    count = math.ceil(fraction * len(points))
    return list(points[:count])


__all__ = [
    "DEFAULT_BOUNDS_PADDING_DEG",
    "bounds_of",
    "normalize",
    "path_portion",
    "planar_distance",
    "squared_planar_distance",
]
