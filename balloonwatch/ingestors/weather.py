"""Point weather lookups using OpenWeatherMap current conditions."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from balloonwatch.config import settings
from balloonwatch.core.rate_limiter import SnapshotCache
from balloonwatch.models.weather import WeatherSample, Wind

logger = logging.getLogger("balloonwatch.ingestors.weather")


class WeatherUnavailableError(RuntimeError):
    """Raised internally when a lookup cannot produce a sample."""


def fallback_sample() -> WeatherSample:
    """Safe default returned when the upstream lookup fails."""

    return WeatherSample(
        temperature=settings.weather_fallback_temperature_c,
        pressure=settings.weather_fallback_pressure_hpa,
        wind=None,
        is_fallback=True,
    )


def _parse_wind(raw: Any) -> Wind | None:
    if not isinstance(raw, dict):
        return None
    speed = raw.get("speed")
    direction = raw.get("deg")
    if speed is None or direction is None:
        return None
    try:
        return Wind(speed_mps=float(speed), direction_deg=float(direction) % 360.0)
    except (TypeError, ValueError):
        logger.debug("Ignoring malformed wind block: %s", raw)
        return None


def parse_weather_payload(payload: Any) -> WeatherSample:
    """Convert an OpenWeatherMap current-weather payload into a sample."""

    if not isinstance(payload, dict):
        raise WeatherUnavailableError("Weather payload is not an object")

    main = payload.get("main")
    if not isinstance(main, dict):
        raise WeatherUnavailableError("Weather payload missing main block")
    temperature = main.get("temp")
    pressure = main.get("pressure")
    if temperature is None or pressure is None:
        raise WeatherUnavailableError("Weather payload missing temperature or pressure")

    conditions: list[str] = []
    groups = payload.get("weather")
    if isinstance(groups, list):
        for group in groups:
            if isinstance(group, dict):
                label = group.get("main") or group.get("description")
                if isinstance(label, str) and label:
                    conditions.append(label)

    try:
        return WeatherSample(
            temperature=float(temperature),
            pressure=float(pressure),
            wind=_parse_wind(payload.get("wind")),
            condition=conditions[0] if conditions else None,
            conditions=conditions,
        )
    except (TypeError, ValueError) as exc:
        raise WeatherUnavailableError("Weather payload has non-numeric values") from exc


class WeatherIngestor:
    """Fetch weather at balloon positions, throttled per rounded coordinate."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        rate_limiter: SnapshotCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.weather_base_url
        self.api_key = settings.weather_api_key if api_key is None else api_key
        self.timeout = timeout or settings.weather_timeout
        self.rate_limiter = rate_limiter or SnapshotCache(
            settings.weather_min_interval_ms / 1000.0
        )
        self.transport = transport

    async def _request(self, lat: float, lon: float) -> WeatherSample:
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": "metric",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(
                    self.base_url, params=params, headers={"Accept": "application/json"}
                )
        except httpx.TimeoutException as exc:
            raise WeatherUnavailableError("Weather service timeout") from exc
        except httpx.RequestError as exc:
            raise WeatherUnavailableError(f"Weather request failed: {exc}") from exc

        if response.status_code == 429:
            raise WeatherUnavailableError("Weather API rate limit exceeded")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise WeatherUnavailableError(
                f"Weather service returned HTTP {exc.response.status_code}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise WeatherUnavailableError("Weather response is not valid JSON") from exc

        return parse_weather_payload(payload)

    async def get_weather(self, lat: float, lon: float) -> WeatherSample:
        """Return the weather at a position, or the fallback sample on failure."""

        if not self.api_key:
            logger.warning("Weather API key is not configured; using fallback sample")
            return fallback_sample()

        rounded_lat, rounded_lon = self.rate_limiter.rounded(lat, lon)
        try:
            sample = await self.rate_limiter.run(
                lat, lon, lambda: self._request(rounded_lat, rounded_lon)
            )
        except WeatherUnavailableError as exc:
            logger.warning(
                "Weather unavailable at %s,%s: %s", rounded_lat, rounded_lon, exc
            )
            return fallback_sample()

        logger.debug("Weather sample at %s,%s: %s", rounded_lat, rounded_lon, sample)
        return sample


__all__ = [
    "WeatherIngestor",
    "WeatherUnavailableError",
    "fallback_sample",
    "parse_weather_payload",
]
