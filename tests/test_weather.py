# weather source tests: payload transform, lookups, mock data and the cache/fallback chain
# the api client is replaced by small stubs, so nothing here touches the network

import json
import random
from pathlib import Path
import pytest
from cloudcost.cache import TTLCache
from cloudcost.client import APIClientError
from cloudcost.weather import (
    WeatherService,
    icon_code_from_condition,
    map_condition_from_icon,
    mock_weather,
    parse_current_conditions,
    weather_emoji,
)

DATA = Path(__file__).parent / "data"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class StubClient:
    def __init__(self, payload=None, error=None) -> None:
        self.payload = payload
        self.error = error
        self.calls = 0

    def get_current_conditions(self, latitude, longitude):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


def load_payload():
    return json.loads((DATA / "current_conditions.json").read_text())


def test_parse_current_conditions_example():
    observation = parse_current_conditions(load_payload())

    assert observation.temperature == 28          # 27.6 rounded
    assert observation.humidity == 72
    assert observation.wind_speed == 13           # 46.3 km/h -> 12.86 m/s
    assert observation.condition == "Partly Cloudy"
    assert observation.description == "Mostly sunny"
    assert observation.visibility == 16
    assert observation.pressure == 1012
    assert observation.uv_index == 7
    assert observation.cloud_cover == 20
    assert observation.timestamp == "2025-06-01T14:05:00+01:00"


def test_parse_current_conditions_rejects_bad_shape():
    with pytest.raises(ValueError):
        parse_current_conditions({"results": []})
    with pytest.raises(ValueError):
        parse_current_conditions({"results": [{"temperature": {}}]})


def test_condition_lookups_have_defaults():
    assert map_condition_from_icon(15) == "Thunderstorm"
    assert map_condition_from_icon(99) == "Unknown"
    assert icon_code_from_condition("Snow") == 19
    assert icon_code_from_condition("Volcanic Ash") == 1
    assert weather_emoji("Fog") == "🌫️"
    assert weather_emoji("Mixed") == "🌤️"


def test_mock_weather_stays_near_baseline():
    rng = random.Random(42)
    for _ in range(50):
        w = mock_weather("South India", rng)
        assert 32 <= w.temperature <= 38
        assert 0 <= w.humidity <= 100
        assert 0 <= w.wind_speed <= 15
        assert 1000 <= w.pressure <= 1040
        assert w.condition == "Clear"
        assert w.icon_code == 1


def test_mock_weather_unknown_region_uses_default():
    w = mock_weather("Mars North", random.Random(1))
    assert 17 <= w.temperature <= 23
    assert w.condition == "Clear"


def test_service_without_client_returns_mock_data():
    service = WeatherService(None, rng=random.Random(7))
    w = service.get_current_weather(1.283, 103.833, "Southeast Asia")
    assert w.condition == "Thunderstorm"


def test_service_caches_within_ttl():
    clock = FakeClock()
    client = StubClient(payload=load_payload())
    service = WeatherService(client, cache=TTLCache(ttl=900, time_func=clock))

    first = service.get_current_weather(52.3667, 4.9, "West Europe")
    clock.advance(899)
    second = service.get_current_weather(52.3667, 4.9, "West Europe")
    assert client.calls == 1
    assert first == second

    clock.advance(1)
    service.get_current_weather(52.3667, 4.9, "West Europe")
    assert client.calls == 2


def test_service_falls_back_to_stale_cache_on_error():
    clock = FakeClock()
    client = StubClient(payload=load_payload())
    service = WeatherService(client, cache=TTLCache(ttl=900, time_func=clock))
    live = service.get_current_weather(52.3667, 4.9, "West Europe")

    clock.advance(3600)
    client.error = APIClientError("HTTP 503")
    stale = service.get_current_weather(52.3667, 4.9, "West Europe")

    assert client.calls == 2
    assert stale == live


def test_service_falls_back_to_mock_without_cache():
    client = StubClient(error=APIClientError("boom"))
    service = WeatherService(client, rng=random.Random(3))
    w = service.get_current_weather(35.68, 139.77, "Japan East")
    assert w.condition == "Partly Cloudy"
    # mock data is not cached, so the next call tries the api again
    service.get_current_weather(35.68, 139.77, "Japan East")
    assert client.calls == 2


def test_service_treats_bad_payload_like_api_error():
    client = StubClient(payload={"results": [{}]})
    service = WeatherService(client, rng=random.Random(3))
    w = service.get_current_weather(50.941, -0.799, "UK South")
    assert w.condition == "Rain"
