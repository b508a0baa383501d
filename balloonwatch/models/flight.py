"""Trajectory prediction and flight path models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from balloonwatch.models.danger import DangerReport
from balloonwatch.models.geo import Balloon, Bounds, Position
from balloonwatch.models.weather import WeatherSample


class PredictionStrategy(str, Enum):
    """Supported extrapolation strategies."""

    LAST_DELTA = "last_delta"
    WIND_DRIFT = "wind_drift"


class Prediction(BaseModel):
    """Predicted future points, or the reason none could be produced."""

    strategy: PredictionStrategy
    points: list[Position] = Field(default_factory=list)
    unavailable_reason: Optional[str] = Field(
        default=None, description="Why no prediction was produced",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def available(self) -> bool:
        return self.unavailable_reason is None and bool(self.points)


class FlightPath(BaseModel):
    """Past and predicted track for one balloon, oldest point first."""

    balloon_id: str
    past: list[Position] = Field(default_factory=list)
    predicted: list[Position] = Field(default_factory=list)
    strategy: PredictionStrategy
    unavailable_reason: Optional[str] = None
    bounds: Optional[Bounds] = None


class BalloonStatus(BaseModel):
    """A current balloon with its weather and danger assessment."""

    balloon: Balloon
    weather: WeatherSample
    danger: DangerReport

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_dangerous(self) -> bool:
        return self.danger.is_dangerous


class DashboardState(BaseModel):
    """Derived state for one refresh cycle."""

    generated_at: datetime
    balloons: list[BalloonStatus] = Field(default_factory=list)
    snapshot_count: int = 0


class PredictRequest(BaseModel):
    """Request body for ad-hoc trajectory prediction."""

    strategy: PredictionStrategy = PredictionStrategy.LAST_DELTA
    path: list[Position] = Field(
        default_factory=list, description="History ordered oldest first",
    )
    position: Optional[Position] = Field(
        default=None, description="Starting point for wind drift",
    )
    weather: Optional[WeatherSample] = None
    steps: Optional[int] = Field(default=None, ge=1, le=500)


class ClassifyRequest(BaseModel):
    """Request body for weather danger classification."""

    weather: WeatherSample
    position: Optional[Position] = None


__all__ = [
    "BalloonStatus",
    "ClassifyRequest",
    "DashboardState",
    "FlightPath",
    "PredictRequest",
    "Prediction",
    "PredictionStrategy",
]
