"""Danger verdict and warning models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class DangerVerdict(BaseModel):
    """Outcome of a single danger check."""

    model_config = ConfigDict(frozen=True)

    is_dangerous: bool = Field(..., description="Whether any condition was met")
    reason: Optional[str] = Field(
        default=None, description="First matching condition, set only when dangerous",
    )

    @model_validator(mode="after")
    def _reason_matches_flag(self) -> "DangerVerdict":
        if self.is_dangerous != (self.reason is not None):
            raise ValueError("reason must be set if and only if is_dangerous")
        return self


class WeatherWarning(BaseModel):
    """A single weather condition flagged for display."""

    type: Literal["storm", "temperature", "pressure", "wind"]
    severity: Literal["low", "medium", "high"]
    message: str


class DangerReport(BaseModel):
    """Weather and location danger tracked separately for one balloon."""

    weather: DangerVerdict
    location: DangerVerdict
    warnings: list[WeatherWarning] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_dangerous(self) -> bool:
        return self.weather.is_dangerous or self.location.is_dangerous


SAFE = DangerVerdict(is_dangerous=False)

__all__ = ["DangerReport", "DangerVerdict", "SAFE", "WeatherWarning"]
