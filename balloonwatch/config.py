"""Configuration settings for BalloonWatch."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger("balloonwatch.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=4)
def get_weather_api_key_from_ssm(parameter_name: str) -> str:
    """Fetch the OpenWeatherMap API key from AWS SSM Parameter Store.

    The value is cached in-memory to avoid repeated SSM calls. Any failure to
    retrieve the key results in a runtime error the caller may downgrade.
    """

    client = boto3.client(
        "ssm",
        region_name=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1",
    )
    try:
        response = client.get_parameter(Name=parameter_name, WithDecryption=True)
        value = response.get("Parameter", {}).get("Value")
    except (ClientError, BotoCoreError) as exc:  # pragma: no cover - AWS error passthrough
        logger.error("Failed to load weather API key from SSM: %s", exc)
        raise RuntimeError("Unable to load weather API key from SSM") from exc

    if not value:
        logger.error("Received empty weather API key from SSM")
        raise RuntimeError("Weather API key not configured in SSM")

    return value


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    balloonwatch_env: str = os.getenv("BALLOONWATCH_ENV", "local")
    log_level: str = os.getenv("BALLOONWATCH_LOG_LEVEL", "INFO")

    # Balloon position feed
    feed_base_url: str = os.getenv(
        "BALLOON_FEED_BASE_URL", "https://a.windbornesystems.com/treasure"
    )
    feed_timeout: float = float(os.getenv("BALLOON_FEED_TIMEOUT", "10.0"))
    feed_retries: int = int(os.getenv("BALLOON_FEED_RETRIES", "3"))
    feed_backoff_seconds: float = float(os.getenv("BALLOON_FEED_BACKOFF", "1.0"))
    history_hours: int = int(os.getenv("HISTORY_HOURS", "24"))
    history_max_match_deg: float = float(os.getenv("HISTORY_MAX_MATCH_DEG", "5.0"))

    # Weather lookups
    weather_base_url: str = os.getenv(
        "WEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5/weather"
    )
    weather_timeout: float = float(os.getenv("WEATHER_TIMEOUT", "10.0"))
    weather_api_key: str = os.getenv("OPENWEATHER_API_KEY", "")
    weather_api_key_ssm_param: str | None = os.getenv("WEATHER_API_KEY_SSM_PARAM")
    weather_min_interval_ms: int = int(os.getenv("WEATHER_MIN_INTERVAL_MS", "1000"))
    weather_concurrency: int = int(os.getenv("WEATHER_CONCURRENCY", "10"))
    weather_fallback_temperature_c: float = 20.0
    weather_fallback_pressure_hpa: float = 1013.0

    # Danger thresholds
    danger_cold_c: float = float(os.getenv("DANGER_COLD_C", "-30.0"))
    danger_pressure_hpa: float = float(os.getenv("DANGER_PRESSURE_HPA", "500.0"))
    danger_wind_mps: float = float(os.getenv("DANGER_WIND_MPS", "20.0"))
    polar_latitude_deg: float = float(os.getenv("POLAR_LATITUDE_DEG", "66.5"))
    polar_altitude_km: float = float(os.getenv("POLAR_ALTITUDE_KM", "10.0"))

    # Prediction
    wind_drift_scale: float = float(os.getenv("WIND_DRIFT_SCALE", "0.001"))
    prediction_steps: int = int(os.getenv("PREDICTION_STEPS", "20"))

    # Refresh cycle
    refresh_interval_seconds: float = float(os.getenv("REFRESH_INTERVAL_SECONDS", "300"))
    auto_refresh: bool = _get_bool("AUTO_REFRESH", default=False)


settings = Settings()

# Only reach out to SSM when explicitly configured and no key was supplied
if not settings.weather_api_key and settings.weather_api_key_ssm_param:
    try:
        settings.weather_api_key = get_weather_api_key_from_ssm(
            settings.weather_api_key_ssm_param
        )
    except RuntimeError:
        logger.warning("Weather API key not available at import time")

__all__ = ["settings", "Settings", "get_weather_api_key_from_ssm"]
