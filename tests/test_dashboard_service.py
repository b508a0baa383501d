import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from balloonwatch.core.danger import DangerThresholds
from balloonwatch.core.history import snapshots_from_feed
from balloonwatch.models.flight import PredictionStrategy
from balloonwatch.models.weather import WeatherSample, Wind
from balloonwatch.services.dashboard import DashboardService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

FEED_HOURS = [
    [[20.0, 10.0, 12.0], [100.0, 75.0, 14.0], ["bad"]],
    [[19.0, 9.0, 11.9]],
    [[18.0, 8.0, 11.8]],
]


class FakeFeed:
    def __init__(self, hours):
        self.hours = hours
        self.call_count = 0

    async def fetch_recent(self, hours=None):
        self.call_count += 1
        await asyncio.sleep(0)
        return snapshots_from_feed(self.hours)


class FakeWeatherIngestor:
    def __init__(self, sample: WeatherSample):
        self.sample = sample
        self.calls: list[tuple[float, float]] = []

    async def get_weather(self, lat: float, lon: float):
        self.calls.append((lat, lon))
        return self.sample


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _service(sample: WeatherSample, clock=None) -> tuple[DashboardService, FakeFeed, FakeWeatherIngestor]:
    feed = FakeFeed(FEED_HOURS)
    weather = FakeWeatherIngestor(sample)
    service = DashboardService(
        feed=feed,
        weather=weather,
        thresholds=DangerThresholds(),
        refresh_interval=300,
        clock=clock or MutableClock(NOW),
    )
    return service, feed, weather


CALM = WeatherSample(temperature=-20.0, pressure=600.0, wind=Wind(speed_mps=10.0, direction_deg=90.0))


@pytest.mark.anyio
async def test_refresh_classifies_each_balloon():
    service, feed, weather = _service(CALM)

    state = await service.refresh()

    assert feed.call_count == 1
    assert [s.balloon.id for s in state.balloons] == ["balloon-1", "balloon-2"]
    assert len(weather.calls) == 2
    assert state.snapshot_count == 3
    assert state.generated_at == NOW

    first, polar = state.balloons
    assert first.is_dangerous is False
    assert polar.danger.weather.is_dangerous is False
    assert polar.danger.location.reason == "Arctic zone above 10 km"
    assert polar.is_dangerous is True


@pytest.mark.anyio
async def test_current_state_reuses_fresh_state_and_refreshes_stale():
    clock = MutableClock(NOW)
    service, feed, _ = _service(CALM, clock=clock)

    await service.current_state()
    await service.current_state()
    assert feed.call_count == 1

    clock.now = NOW + timedelta(minutes=6)
    await service.current_state()
    assert feed.call_count == 2


@pytest.mark.anyio
async def test_flight_path_last_delta_threads_history():
    service, _, _ = _service(CALM)

    path = await service.flight_path("balloon-1", strategy=PredictionStrategy.LAST_DELTA)

    assert path is not None
    assert [(p.lat, p.lon) for p in path.past] == [(8.0, 18.0), (9.0, 19.0), (10.0, 20.0)]
    assert path.past[0].timestamp == NOW - timedelta(hours=2)
    assert len(path.predicted) == 1
    assert path.predicted[0].lat == pytest.approx(11.0)
    assert path.predicted[0].lon == pytest.approx(21.0)
    assert path.unavailable_reason is None
    assert path.bounds is not None
    assert path.bounds.south_west.lat <= 8.0
    assert path.bounds.north_east.lon >= 21.0


@pytest.mark.anyio
async def test_flight_path_wind_drift_uses_current_weather():
    service, _, _ = _service(CALM)

    path = await service.flight_path("balloon-1", strategy=PredictionStrategy.WIND_DRIFT, steps=5)

    assert path is not None
    assert len(path.predicted) == 5
    assert path.predicted[-1].lon == pytest.approx(20.05)


@pytest.mark.anyio
async def test_flight_path_degrades_without_history_or_wind():
    no_wind = WeatherSample(temperature=20.0, pressure=1013.0, is_fallback=True)
    service, _, _ = _service(no_wind)

    lonely = await service.flight_path("balloon-2", strategy=PredictionStrategy.LAST_DELTA)
    drifting = await service.flight_path("balloon-1", strategy=PredictionStrategy.WIND_DRIFT)

    assert lonely is not None
    assert len(lonely.past) == 1
    assert lonely.predicted == []
    assert lonely.unavailable_reason is not None
    assert drifting is not None
    assert drifting.predicted == []
    assert drifting.unavailable_reason == "Wind data unavailable"


@pytest.mark.anyio
async def test_flight_path_unknown_balloon():
    service, _, _ = _service(CALM)

    assert await service.flight_path("balloon-99") is None


@pytest.mark.anyio
async def test_concurrent_stale_reads_share_one_refresh():
    service, feed, weather = _service(CALM)

    states = await asyncio.gather(*(service.current_state() for _ in range(5)))

    assert feed.call_count == 1
    assert len(weather.calls) == 2
    assert all(state is states[0] for state in states)
