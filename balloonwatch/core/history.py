"""Thread a balloon through hourly snapshots by nearest-point matching."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import math
from typing import Any, Sequence

from balloonwatch.core.geo import squared_planar_distance
from balloonwatch.core.ingest import parse_triple
from balloonwatch.models.geo import GeoPoint, MatchedPosition, Snapshot

logger = logging.getLogger("balloonwatch.core.history")

DEFAULT_MAX_MATCH_DISTANCE_DEG = 5.0


def snapshots_from_feed(raw_hours: Sequence[Sequence[Any] | None]) -> list[Snapshot]:
    """Wrap per-hour payloads (index = hours ago) into snapshots."""

    return [
        Snapshot(hour_offset=offset, entries=list(entries or []))
        for offset, entries in enumerate(raw_hours)
    ]


def _closest_entry(
    target: GeoPoint, snapshot: Snapshot
) -> tuple[float, tuple[float, float, float]] | None:
    best: tuple[float, tuple[float, float, float]] | None = None
    for entry in snapshot.entries:
        parsed = parse_triple(entry)
        if parsed is None:
            continue
        lon, lat, _ = parsed
        distance_sq = squared_planar_distance(target, GeoPoint(lat=lat, lon=lon))
        # strict comparison keeps the first minimum on ties
        if best is None or distance_sq < best[0]:
            best = (distance_sq, parsed)
    return best


def match_history(
    target: GeoPoint,
    snapshots: Sequence[Snapshot],
    *,
    max_distance: float = DEFAULT_MAX_MATCH_DISTANCE_DEG,
    now: datetime | None = None,
) -> list[MatchedPosition]:
    """Return the target's matched positions across snapshots, oldest first.

    Each snapshot contributes at most one point: its entry nearest to the
    target, accepted only when closer than ``max_distance`` degrees. Snapshots
    carry no timestamp, so each match is stamped ``now - hour_offset``.
    An empty result means "no history" and is not an error.
    """

    if not snapshots:
        return []

    reference = now or datetime.now(tz=timezone.utc)
    threshold_sq = max_distance * max_distance
    matches: list[MatchedPosition] = []

    for snapshot in snapshots:
        closest = _closest_entry(target, snapshot)
        if closest is None:
            continue
        distance_sq, (lon, lat, alt) = closest
        if distance_sq >= threshold_sq:
            logger.debug(
                "No match within %.2f deg in snapshot %sh (nearest %.2f)",
                max_distance,
                snapshot.hour_offset,
                math.sqrt(distance_sq),
            )
            continue
        matches.append(
            MatchedPosition(
                lat=lat,
                lon=lon,
                alt=alt,
                timestamp=reference - timedelta(hours=snapshot.hour_offset),
                distance=math.sqrt(distance_sq),
                hour_offset=snapshot.hour_offset,
            )
        )

    matches.sort(key=lambda match: match.timestamp)
    return matches


__all__ = ["DEFAULT_MAX_MATCH_DISTANCE_DEG", "match_history", "snapshots_from_feed"]
