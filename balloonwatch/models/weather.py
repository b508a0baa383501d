"""Weather sample models consumed by prediction and danger checks."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class Wind(BaseModel):
    """Wind reported alongside a weather sample."""

    speed_mps: float = Field(..., ge=0, description="Wind speed in meters per second")
    direction_deg: float = Field(
        ..., ge=0, lt=360, description="Meteorological wind direction in degrees",
    )


class WeatherSample(BaseModel):
    """Point weather conditions at a balloon position."""

    temperature: float = Field(..., description="Air temperature in Celsius")
    pressure: float = Field(..., description="Air pressure in hPa")
    wind: Optional[Wind] = Field(
        default=None, description="Wind, absent when the source does not report it",
    )
    condition: Optional[str] = Field(
        default=None, description="Short textual summary such as 'Thunderstorm'",
    )
    conditions: list[str] = Field(
        default_factory=list, description="Every condition group reported for the point",
    )
    is_fallback: bool = Field(
        default=False, description="True when the upstream lookup failed",
    )

    @property
    def has_wind(self) -> bool:
        return self.wind is not None


__all__ = ["WeatherSample", "Wind"]
