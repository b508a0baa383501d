"""Validation of raw feed triples into balloons."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import math
from typing import Any, Sequence

from balloonwatch.models.geo import Balloon, Position

logger = logging.getLogger("balloonwatch.core.ingest")


def _to_number(value: Any) -> float | None:
    # bool is an int subclass; strings are never coerced
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def parse_triple(entry: Any) -> tuple[float, float, float] | None:
    """Return ``(lon, lat, alt)`` for a valid raw entry, else None.

    Entries must be sequences of exactly three finite numbers with latitude
    in [-90, 90] and longitude in [-180, 180]. Invalid entries are rejected,
    never coerced.
    """

    if not isinstance(entry, (list, tuple)) or len(entry) != 3:
        return None

    lon = _to_number(entry[0])
    lat = _to_number(entry[1])
    alt = _to_number(entry[2])
    if lon is None or lat is None or alt is None:
        return None
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        return None
    return lon, lat, alt


def ingest_snapshot(
    raw: Sequence[Any] | None, *, observed_at: datetime | None = None
) -> list[Balloon]:
    """Convert raw ``[lon, lat, alt]`` triples into balloons.

    Order is preserved and invalid entries are dropped. Ids are assigned as
    ``balloon-1``, ``balloon-2``, ... over the surviving entries.
    """

    if not raw:
        return []

    timestamp = observed_at or datetime.now(tz=timezone.utc)
    balloons: list[Balloon] = []
    dropped = 0
    for entry in raw:
        parsed = parse_triple(entry)
        if parsed is None:
            dropped += 1
            continue
        lon, lat, alt = parsed
        balloons.append(
            Balloon(
                id=f"balloon-{len(balloons) + 1}",
                position=Position(lat=lat, lon=lon, alt=alt, timestamp=timestamp),
            )
        )

    if dropped:
        logger.debug("Dropped %s invalid balloon entries", dropped)
    return balloons


__all__ = ["ingest_snapshot", "parse_triple"]
