"""Refresh-cycle orchestration for the balloon dashboard."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, Optional

from balloonwatch.config import settings
from balloonwatch.core.danger import DangerThresholds, assess
from balloonwatch.core.geo import bounds_of
from balloonwatch.core.history import match_history
from balloonwatch.core.ingest import ingest_snapshot
from balloonwatch.core.trajectory import predict
from balloonwatch.ingestors import BalloonFeedIngestor, WeatherIngestor, fallback_sample
from balloonwatch.models.flight import (
    BalloonStatus,
    DashboardState,
    FlightPath,
    PredictionStrategy,
)
from balloonwatch.models.geo import Balloon, Snapshot
from balloonwatch.models.weather import WeatherSample

logger = logging.getLogger("balloonwatch.dashboard")


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class DashboardService:
    """Recompute balloon danger and flight paths once per refresh cycle.

    Nothing is persisted: the latest snapshots and derived state live in
    memory until the next refresh replaces them.
    """

    def __init__(
        self,
        feed: Optional[BalloonFeedIngestor] = None,
        weather: Optional[WeatherIngestor] = None,
        *,
        thresholds: Optional[DangerThresholds] = None,
        concurrency: int | None = None,
        max_match_distance: float | None = None,
        refresh_interval: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.feed = feed or BalloonFeedIngestor()
        self.weather = weather or WeatherIngestor()
        self.thresholds = thresholds or DangerThresholds.from_settings()
        self.concurrency = max(concurrency or settings.weather_concurrency, 1)
        self.max_match_distance = max_match_distance or settings.history_max_match_deg
        self.refresh_interval = refresh_interval or settings.refresh_interval_seconds
        self._clock = clock
        self.snapshots: list[Snapshot] = []
        self.state: DashboardState | None = None
        self._refresh_lock = asyncio.Lock()

    async def _weather_for(self, balloon: Balloon, semaphore: asyncio.Semaphore) -> WeatherSample:
        async with semaphore:
            try:
                return await self.weather.get_weather(
                    balloon.position.lat, balloon.position.lon
                )
            except Exception as exc:  # pragma: no cover - defensive logging
                logger.warning("Weather lookup failed for %s: %s", balloon.id, exc)
                return fallback_sample()

    async def refresh(self) -> DashboardState:
        """Fetch the recent window and rebuild the derived state."""

        async with self._refresh_lock:
            return await self._rebuild()

    async def _rebuild(self) -> DashboardState:
        generated_at = self._clock()
        snapshots = await self.feed.fetch_recent()
        current = next((s for s in snapshots if s.entries), None)
        balloons = ingest_snapshot(current.entries if current else [], observed_at=generated_at)

        semaphore = asyncio.Semaphore(self.concurrency)
        samples = await asyncio.gather(*(self._weather_for(b, semaphore) for b in balloons))

        statuses = [
            BalloonStatus(
                balloon=balloon,
                weather=sample,
                danger=assess(sample, balloon.position, self.thresholds),
            )
            for balloon, sample in zip(balloons, samples)
        ]

        state = DashboardState(
            generated_at=generated_at,
            balloons=statuses,
            snapshot_count=sum(1 for s in snapshots if s.entries),
        )
        self.snapshots = snapshots
        self.state = state

        logger.info(
            "Dashboard refreshed: balloons=%s dangerous=%s snapshots=%s",
            len(statuses),
            sum(1 for s in statuses if s.is_dangerous),
            state.snapshot_count,
        )
        return state

    def is_stale(self) -> bool:
        if self.state is None:
            return True
        age = self._clock() - self.state.generated_at
        return age >= timedelta(seconds=self.refresh_interval)

    async def current_state(self) -> DashboardState:
        """Return the stored state, refreshing it once if it has gone stale.

        Callers that arrive while a refresh is running wait for it and reuse
        its result.
        """

        state = self.state
        if state is not None and not self.is_stale():
            return state
        async with self._refresh_lock:
            state = self.state
            if state is not None and not self.is_stale():
                return state
            return await self._rebuild()

    def find_balloon(self, balloon_id: str) -> BalloonStatus | None:
        if self.state is None:
            return None
        return next((s for s in self.state.balloons if s.balloon.id == balloon_id), None)

    async def flight_path(
        self,
        balloon_id: str,
        strategy: PredictionStrategy = PredictionStrategy.WIND_DRIFT,
        steps: int | None = None,
    ) -> FlightPath | None:
        """Thread the balloon's history and extrapolate its path.

        Returns None for an unknown balloon id.
        """

        state = await self.current_state()
        status = self.find_balloon(balloon_id)
        if status is None:
            return None

        position = status.balloon.position
        past = match_history(
            position,
            self.snapshots,
            max_distance=self.max_match_distance,
            now=state.generated_at,
        )
        prediction = predict(
            strategy,
            path=past,
            position=position,
            weather=status.weather,
            steps=steps,
        )

        return FlightPath(
            balloon_id=balloon_id,
            past=past,
            predicted=prediction.points,
            strategy=strategy,
            unavailable_reason=prediction.unavailable_reason,
            bounds=bounds_of([*past, *prediction.points, position]),
        )

    async def run(self) -> None:
        """Refresh on a fixed interval until cancelled."""

        backoff = 1
        while True:
            try:
                await self.refresh()
                backoff = 1
                await asyncio.sleep(self.refresh_interval)
                continue
            except asyncio.CancelledError:
                logger.info("Dashboard refresh loop cancelled")
                raise
            except Exception as exc:  # pragma: no cover - defensive logging
                logger.warning("Dashboard refresh failed: %s", exc)

            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, 60)


__all__ = ["DashboardService"]
