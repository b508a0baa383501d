"""Pydantic models for BalloonWatch."""

from .danger import SAFE, DangerReport, DangerVerdict, WeatherWarning
from .flight import (
    BalloonStatus,
    ClassifyRequest,
    DashboardState,
    FlightPath,
    PredictRequest,
    Prediction,
    PredictionStrategy,
)
from .geo import Balloon, Bounds, GeoPoint, MatchedPosition, Position, Snapshot
from .weather import WeatherSample, Wind

__all__ = [
    "Balloon",
    "BalloonStatus",
    "Bounds",
    "ClassifyRequest",
    "DangerReport",
    "DangerVerdict",
    "DashboardState",
    "FlightPath",
    "GeoPoint",
    "MatchedPosition",
    "Position",
    "PredictRequest",
    "Prediction",
    "PredictionStrategy",
    "SAFE",
    "Snapshot",
    "WeatherSample",
    "WeatherWarning",
    "Wind",
]
