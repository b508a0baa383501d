"""Trajectory estimation and danger classification core."""

from .danger import DangerThresholds, assess, classify, location_danger, weather_warnings
from .geo import bounds_of, normalize, path_portion, planar_distance, squared_planar_distance
from .history import match_history, snapshots_from_feed
from .ingest import ingest_snapshot, parse_triple
from .rate_limiter import SnapshotCache, round_coordinate
from .trajectory import (
    drift_step,
    predict,
    predict_last_delta,
    predict_next_position,
    predict_wind_drift,
)

__all__ = [
    "DangerThresholds",
    "SnapshotCache",
    "assess",
    "bounds_of",
    "classify",
    "drift_step",
    "ingest_snapshot",
    "location_danger",
    "match_history",
    "normalize",
    "parse_triple",
    "path_portion",
    "planar_distance",
    "predict",
    "predict_last_delta",
    "predict_next_position",
    "predict_wind_drift",
    "round_coordinate",
    "snapshots_from_feed",
    "squared_planar_distance",
    "weather_warnings",
]
