"""Weather and location danger classification.

Weather danger uses one canonical threshold table (cold below -30 °C,
pressure below 500 hPa, wind above 20 m/s, storm or thunder in any reported
condition). Only the first matching condition is surfaced as the reason.

Location danger is an independent geofence: the polar bands beyond the
Arctic and Antarctic circles are dangerous above an altitude threshold,
whatever the weather. The two verdicts are reported side by side and only
combined for display.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from balloonwatch.config import settings
from balloonwatch.models.danger import SAFE, DangerReport, DangerVerdict, WeatherWarning
from balloonwatch.models.geo import Position
from balloonwatch.models.weather import WeatherSample

logger = logging.getLogger("balloonwatch.core.danger")

STORM_KEYWORDS = ("storm", "thunder")


@dataclass(frozen=True)
class DangerThresholds:
    cold_c: float = -30.0
    pressure_hpa: float = 500.0
    wind_mps: float = 20.0
    polar_latitude_deg: float = 66.5
    polar_altitude_km: float = 10.0

    @classmethod
    def from_settings(cls) -> "DangerThresholds":
        return cls(
            cold_c=settings.danger_cold_c,
            pressure_hpa=settings.danger_pressure_hpa,
            wind_mps=settings.danger_wind_mps,
            polar_latitude_deg=settings.polar_latitude_deg,
            polar_altitude_km=settings.polar_altitude_km,
        )


def _is_stormy(weather: WeatherSample) -> bool:
    labels = [weather.condition, *weather.conditions]
    return any(
        keyword in label.lower()
        for label in labels
        if label
        for keyword in STORM_KEYWORDS
    )


def _cold_reason(weather: WeatherSample) -> str:
    return f"Extreme cold temperature: {weather.temperature:.1f}°C"


def _pressure_reason(weather: WeatherSample) -> str:
    return f"Dangerously low pressure: {weather.pressure:g} hPa"


def classify(
    weather: WeatherSample,
    position: Optional[Position] = None,
    thresholds: Optional[DangerThresholds] = None,
) -> DangerVerdict:
    """Evaluate a weather sample against the threshold table.

    The first matching condition wins, in the order cold, pressure, wind,
    storm. ``position`` only adds context to the log line.
    """

    limits = thresholds or DangerThresholds.from_settings()

    reason: str | None = None
    if weather.temperature < limits.cold_c:
        reason = _cold_reason(weather)
    elif weather.pressure < limits.pressure_hpa:
        reason = _pressure_reason(weather)
    elif weather.wind is not None and weather.wind.speed_mps > limits.wind_mps:
        reason = "High wind speeds"
    elif _is_stormy(weather):
        reason = "Severe storm in the area"

    if reason is None:
        return SAFE

    if position is not None:
        logger.info(
            "Weather danger at %.3f,%.3f alt=%.2fkm: %s",
            position.lat,
            position.lon,
            position.alt,
            reason,
        )
    return DangerVerdict(is_dangerous=True, reason=reason)


def location_danger(
    lat: float,
    lon: float,
    alt: float,
    thresholds: Optional[DangerThresholds] = None,
) -> DangerVerdict:
    """Flag positions inside a polar band above the altitude threshold."""

    limits = thresholds or DangerThresholds.from_settings()
    if abs(lat) < limits.polar_latitude_deg or alt <= limits.polar_altitude_km:
        return SAFE

    region = "Arctic" if lat > 0 else "Antarctic"
    return DangerVerdict(
        is_dangerous=True,
        reason=f"{region} zone above {limits.polar_altitude_km:g} km",
    )


def weather_warnings(
    weather: WeatherSample, thresholds: Optional[DangerThresholds] = None
) -> list[WeatherWarning]:
    """List every triggered weather condition for display."""

    limits = thresholds or DangerThresholds.from_settings()
    warnings: list[WeatherWarning] = []

    if _is_stormy(weather):
        warnings.append(
            WeatherWarning(type="storm", severity="high", message="Severe storm in the area")
        )
    if weather.temperature < limits.cold_c:
        warnings.append(
            WeatherWarning(type="temperature", severity="high", message=_cold_reason(weather))
        )
    if weather.pressure < limits.pressure_hpa:
        warnings.append(
            WeatherWarning(type="pressure", severity="high", message=_pressure_reason(weather))
        )
    if weather.wind is not None and weather.wind.speed_mps > limits.wind_mps:
        warnings.append(
            WeatherWarning(type="wind", severity="high", message="High wind speeds")
        )

    return warnings


def assess(
    weather: WeatherSample,
    position: Position,
    thresholds: Optional[DangerThresholds] = None,
) -> DangerReport:
    """Build the weather and location verdicts for one balloon."""

    limits = thresholds or DangerThresholds.from_settings()
    return DangerReport(
        weather=classify(weather, position, limits),
        location=location_danger(position.lat, position.lon, position.alt, limits),
        warnings=weather_warnings(weather, limits),
    )


__all__ = [
    "DangerThresholds",
    "assess",
    "classify",
    "location_danger",
    "weather_warnings",
]
