"""Short-horizon trajectory extrapolation.

Two strategies are supported and selected by the caller:

* ``LAST_DELTA`` repeats the lat/lon step between the two most recent fixes
  (a constant-velocity model).
* ``WIND_DRIFT`` displaces a single fix along the reported wind, scaled by a
  fixed factor, while nudging altitude toward a soft 5 km equilibrium.

Neither model is physically validated. When preconditions are not met the
functions return ``None`` (or a ``Prediction`` carrying a reason) instead of
raising, so callers can simply draw no predicted line.
"""

from __future__ import annotations

from datetime import timedelta
import logging
import math
from typing import Optional, Sequence

from balloonwatch.config import settings
from balloonwatch.core.geo import normalize
from balloonwatch.models.flight import Prediction, PredictionStrategy
from balloonwatch.models.geo import Position
from balloonwatch.models.weather import WeatherSample, Wind

logger = logging.getLogger("balloonwatch.core.trajectory")

DEFAULT_WIND_DRIFT_SCALE = 0.001
ALTITUDE_EQUILIBRIUM_KM = 5.0
ALTITUDE_STEP_KM = 0.1
MIN_ALTITUDE_KM = 0.1
MAX_ALTITUDE_KM = 10.0
WIND_DRIFT_STEP_INTERVAL = timedelta(hours=1)

UNAVAILABLE_INSUFFICIENT_HISTORY = "At least two positions are required"
UNAVAILABLE_NO_WIND = "Wind data unavailable"
UNAVAILABLE_NO_POSITION = "No starting position"


def predict_last_delta(path: Sequence[Position], steps: int = 1) -> list[Position] | None:
    """Extrapolate ``steps`` points from the last two fixes of ``path``.

    Fixes are ordered by timestamp first. Altitude is held at the last value
    and each predicted point advances by the interval between the two fixes.
    Returns None when fewer than two fixes are available.
    """

    if len(path) < 2 or steps < 1:
        return None

    ordered = sorted(path, key=lambda p: p.timestamp)
    second_last, last = ordered[-2], ordered[-1]
    d_lat = last.lat - second_last.lat
    d_lon = last.lon - second_last.lon
    d_time = last.timestamp - second_last.timestamp

    predicted: list[Position] = []
    lat, lon, timestamp = last.lat, last.lon, last.timestamp
    for _ in range(steps):
        lat, lon = normalize(lat + d_lat, lon + d_lon)
        timestamp = timestamp + d_time
        predicted.append(Position(lat=lat, lon=lon, alt=last.alt, timestamp=timestamp))
    return predicted


def predict_next_position(path: Sequence[Position]) -> Position | None:
    """Single-step constant-delta prediction."""

    predicted = predict_last_delta(path, steps=1)
    return predicted[0] if predicted else None


def _drift_altitude(alt_km: float) -> float:
    change = -ALTITUDE_STEP_KM if alt_km > ALTITUDE_EQUILIBRIUM_KM else ALTITUDE_STEP_KM
    return max(MIN_ALTITUDE_KM, min(MAX_ALTITUDE_KM, alt_km + change))


def drift_step(
    position: Position,
    wind: Wind,
    *,
    scale: float = DEFAULT_WIND_DRIFT_SCALE,
    interval: timedelta = WIND_DRIFT_STEP_INTERVAL,
) -> Position:
    """Return the position one wind-drift step after ``position``."""

    wind_rad = math.radians(wind.direction_deg)
    d_lon = math.sin(wind_rad) * wind.speed_mps * scale
    d_lat = math.cos(wind_rad) * wind.speed_mps * scale
    lat, lon = normalize(position.lat + d_lat, position.lon + d_lon)
    return Position(
        lat=lat,
        lon=lon,
        alt=_drift_altitude(position.alt),
        timestamp=position.timestamp + interval,
    )


def predict_wind_drift(
    position: Position,
    weather: Optional[WeatherSample],
    steps: int | None = None,
    *,
    scale: float | None = None,
) -> list[Position] | None:
    """Iterate the wind-drift step, feeding each output back in.

    Returns None when the weather sample carries no wind.
    """

    if weather is None or weather.wind is None:
        return None

    steps = settings.prediction_steps if steps is None else steps
    scale = settings.wind_drift_scale if scale is None else scale
    predicted: list[Position] = []
    current = position
    for _ in range(steps):
        current = drift_step(current, weather.wind, scale=scale)
        predicted.append(current)
    return predicted


def predict(
    strategy: PredictionStrategy,
    *,
    path: Sequence[Position] = (),
    position: Position | None = None,
    weather: WeatherSample | None = None,
    steps: int | None = None,
) -> Prediction:
    """Run the selected strategy and wrap the outcome in a ``Prediction``.

    For wind drift the starting point is ``position`` or, when omitted, the
    most recent fix in ``path``.
    """

    if strategy == PredictionStrategy.LAST_DELTA:
        points = predict_last_delta(path, steps=steps or 1)
        if points is None:
            return Prediction(
                strategy=strategy, unavailable_reason=UNAVAILABLE_INSUFFICIENT_HISTORY
            )
        return Prediction(strategy=strategy, points=points)

    start = position
    if start is None and path:
        start = max(path, key=lambda p: p.timestamp)
    if start is None:
        return Prediction(strategy=strategy, unavailable_reason=UNAVAILABLE_NO_POSITION)

    points = predict_wind_drift(start, weather, steps)
    if points is None:
        logger.debug("Wind drift unavailable for %.3f,%.3f", start.lat, start.lon)
        return Prediction(strategy=strategy, unavailable_reason=UNAVAILABLE_NO_WIND)
    return Prediction(strategy=strategy, points=points)


__all__ = [
    "DEFAULT_WIND_DRIFT_SCALE",
    "drift_step",
    "predict",
    "predict_last_delta",
    "predict_next_position",
    "predict_wind_drift",
]
