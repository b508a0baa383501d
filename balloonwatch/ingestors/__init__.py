"""Data ingestors for BalloonWatch."""

from .balloons import BalloonFeedIngestor, FeedUnavailableError
from .weather import WeatherIngestor, WeatherUnavailableError, fallback_sample

__all__ = [
    "BalloonFeedIngestor",
    "FeedUnavailableError",
    "WeatherIngestor",
    "WeatherUnavailableError",
    "fallback_sample",
]
