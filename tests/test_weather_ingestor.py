import httpx
import pytest

from balloonwatch.core.danger import classify
from balloonwatch.core.rate_limiter import SnapshotCache
from balloonwatch.ingestors.weather import WeatherIngestor, parse_weather_payload, WeatherUnavailableError

PAYLOAD = {
    "main": {"temp": -42.5, "pressure": 310, "humidity": 12},
    "wind": {"speed": 14.2, "deg": 270},
    "weather": [{"main": "Thunderstorm", "description": "thunderstorm with rain"}],
}


def _ingestor(handler, **kwargs) -> WeatherIngestor:
    return WeatherIngestor(
        base_url="http://test-weather",
        api_key=kwargs.pop("api_key", "test-key"),
        transport=httpx.MockTransport(handler),
        rate_limiter=kwargs.pop("rate_limiter", SnapshotCache(0.0)),
        **kwargs,
    )


@pytest.mark.anyio
async def test_weather_ingestor_parses_current_weather():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request):
        captured.append(request)
        return httpx.Response(200, json=PAYLOAD)

    sample = await _ingestor(handler).get_weather(10.1234, 20.5678)

    assert sample.temperature == -42.5
    assert sample.pressure == 310
    assert sample.wind is not None
    assert sample.wind.speed_mps == 14.2
    assert sample.wind.direction_deg == 270
    assert sample.condition == "Thunderstorm"
    assert sample.is_fallback is False

    params = captured[0].url.params
    assert params["lat"] == "10.12"
    assert params["lon"] == "20.57"
    assert params["units"] == "metric"
    assert params["appid"] == "test-key"


@pytest.mark.anyio
async def test_weather_ingestor_missing_wind_is_not_zero_wind():
    payload = {"main": {"temp": 5.0, "pressure": 1000}}

    sample = await _ingestor(lambda request: httpx.Response(200, json=payload)).get_weather(1.0, 2.0)

    assert sample.wind is None
    assert sample.has_wind is False


@pytest.mark.anyio
async def test_weather_ingestor_falls_back_on_http_error():
    sample = await _ingestor(lambda request: httpx.Response(500, text="boom")).get_weather(1.0, 2.0)

    assert sample.is_fallback is True
    assert sample.temperature == 20.0
    assert sample.pressure == 1013.0
    assert sample.wind is None


@pytest.mark.anyio
async def test_weather_ingestor_falls_back_on_rate_limit_and_bad_json():
    limited = await _ingestor(lambda request: httpx.Response(429, text="slow down")).get_weather(1.0, 2.0)
    garbled = await _ingestor(lambda request: httpx.Response(200, text="{not json")).get_weather(1.0, 2.0)

    assert limited.is_fallback is True
    assert garbled.is_fallback is True


@pytest.mark.anyio
async def test_weather_ingestor_falls_back_on_timeout():
    def handler(request: httpx.Request):
        raise httpx.ReadTimeout("timeout", request=request)

    sample = await _ingestor(handler).get_weather(1.0, 2.0)

    assert sample.is_fallback is True


@pytest.mark.anyio
async def test_weather_ingestor_without_api_key_skips_request():
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request):
        calls.append(request)
        return httpx.Response(200, json=PAYLOAD)

    sample = await _ingestor(handler, api_key="").get_weather(1.0, 2.0)

    assert sample.is_fallback is True
    assert calls == []


@pytest.mark.anyio
async def test_weather_ingestor_throttles_through_rate_limiter():
    sleeps: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    limiter = SnapshotCache(1.0, clock=lambda: 100.0, sleep=fake_sleep)
    ingestor = _ingestor(lambda request: httpx.Response(200, json=PAYLOAD), rate_limiter=limiter)

    await ingestor.get_weather(10.001, 20.001)
    await ingestor.get_weather(10.002, 20.002)
    await ingestor.get_weather(30.0, 40.0)

    assert sleeps == [1.0]


def test_parse_weather_payload_rejects_missing_fields():
    with pytest.raises(WeatherUnavailableError):
        parse_weather_payload({"main": {"temp": 1.0}})
    with pytest.raises(WeatherUnavailableError):
        parse_weather_payload([])

    # zero is a valid reading
    sample = parse_weather_payload({"main": {"temp": 0, "pressure": 1000}, "wind": {"speed": 3, "deg": 360}})
    assert sample.temperature == 0
    assert sample.wind.direction_deg == 0


def test_parse_weather_payload_keeps_every_condition_group():
    sample = parse_weather_payload(
        {
            "main": {"temp": 10, "pressure": 1000},
            "weather": [{"main": "Clouds"}, {"main": "Thunderstorm"}],
        }
    )

    assert sample.condition == "Clouds"
    assert sample.conditions == ["Clouds", "Thunderstorm"]
    assert classify(sample).reason == "Severe storm in the area"
