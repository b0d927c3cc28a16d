# weather source: turns Azure Maps payloads into WeatherObservation, with a cache and mock fallback

from __future__ import annotations
import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional
from .cache import TTLCache
from .client import APIClientError, AzureMapsWeatherClient
from .models import WeatherObservation, round_half_up

logger = logging.getLogger(__name__)

KMH_TO_MS = 0.277778

ICON_CONDITIONS: Mapping[int, str] = {
    1: "Clear", 2: "Partly Cloudy", 3: "Partly Cloudy", 4: "Cloudy",
    5: "Haze", 6: "Mostly Cloudy", 7: "Cloudy", 8: "Overcast",
    11: "Fog", 12: "Rain", 13: "Light Rain", 14: "Heavy Rain",
    15: "Thunderstorm", 16: "Thunderstorm", 17: "Thunderstorm",
    18: "Rain", 19: "Snow", 20: "Light Snow", 21: "Heavy Snow",
    22: "Snow", 23: "Mixed", 24: "Freezing Rain", 25: "Sleet",
    26: "Freezing Rain",
}

CONDITION_ICONS: Mapping[str, int] = {
    "Clear": 1,
    "Partly Cloudy": 3,
    "Cloudy": 7,
    "Rain": 12,
    "Thunderstorm": 15,
    "Snow": 19,
    "Haze": 5,
    "Fog": 11,
}

WEATHER_EMOJI: Mapping[str, str] = {
    "Clear": "☀️",
    "Partly Cloudy": "⛅",
    "Cloudy": "☁️",
    "Rain": "🌧️",
    "Light Rain": "🌦️",
    "Heavy Rain": "🌧️",
    "Thunderstorm": "⛈️",
    "Snow": "❄️",
    "Light Snow": "🌨️",
    "Heavy Snow": "❄️",
    "Haze": "🌫️",
    "Fog": "🌫️",
    "Overcast": "☁️",
}

# typical conditions per region display name, used when no live data is available
MOCK_BASELINES: Mapping[str, Dict[str, Any]] = {
    "East US": {"temp": 22, "humidity": 65, "condition": "Partly Cloudy"},
    "West US": {"temp": 25, "humidity": 55, "condition": "Clear"},
    "North Europe": {"temp": 15, "humidity": 75, "condition": "Cloudy"},
    "West Europe": {"temp": 18, "humidity": 70, "condition": "Rain"},
    "Southeast Asia": {"temp": 32, "humidity": 85, "condition": "Thunderstorm"},
    "East Asia": {"temp": 28, "humidity": 80, "condition": "Haze"},
    "Australia East": {"temp": 20, "humidity": 60, "condition": "Clear"},
    "Japan East": {"temp": 16, "humidity": 68, "condition": "Partly Cloudy"},
    "UK South": {"temp": 12, "humidity": 82, "condition": "Rain"},
    "Canada Central": {"temp": 8, "humidity": 58, "condition": "Snow"},
    "Brazil South": {"temp": 26, "humidity": 72, "condition": "Thunderstorm"},
    "South India": {"temp": 35, "humidity": 90, "condition": "Clear"},
}
DEFAULT_MOCK_BASELINE: Mapping[str, Any] = {"temp": 20, "humidity": 60, "condition": "Clear"}


def map_condition_from_icon(icon_code: Optional[int]) -> str:
    return ICON_CONDITIONS.get(icon_code, "Unknown")


def icon_code_from_condition(condition: str) -> int:
    return CONDITION_ICONS.get(condition, 1)


def weather_emoji(condition: str) -> str:
    return WEATHER_EMOJI.get(condition, "🌤️")


def _round(value: float) -> int:
    return int(round_half_up(value, 0))


# transform raw provider payload into our typed value object and check shape
def parse_current_conditions(data: Mapping[str, Any]) -> WeatherObservation:
    # azure maps shape: data["results"][0] with nested {"value": ...} measurements
    try:
        result = data["results"][0]
        icon_code = result.get("iconCode")
        return WeatherObservation(
            temperature=_round(float(result["temperature"]["value"])),
            humidity=float(result["relativeHumidity"]),
            wind_speed=_round(float(result["wind"]["speed"]["value"]) * KMH_TO_MS),
            condition=map_condition_from_icon(icon_code),
            description=result.get("phrase", ""),
            visibility=_round(float(result["visibility"]["value"])),
            pressure=_round(float(result["pressure"]["value"])),
            timestamp=result.get("dateTime"),
            icon_code=icon_code,
            uv_index=result.get("uvIndex") or 0,
            cloud_cover=result.get("cloudCover") or 0,
        )
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ValueError(f"Unsupported payload shape for parse_current_conditions(): {exc}") from exc


def mock_weather(region_name: str, rng: Optional[random.Random] = None) -> WeatherObservation:
    # plausible values around a per-region baseline so the report still renders without an api key
    rng = rng or random.Random()
    base = MOCK_BASELINES.get(region_name, DEFAULT_MOCK_BASELINE)

    temp_variation = (rng.random() - 0.5) * 6        # +/- 3 degrees
    humidity_variation = (rng.random() - 0.5) * 20   # +/- 10 percent

    return WeatherObservation(
        temperature=_round(base["temp"] + temp_variation),
        humidity=max(0, min(100, _round(base["humidity"] + humidity_variation))),
        wind_speed=_round(rng.random() * 15),
        condition=base["condition"],
        description=base["condition"].lower(),
        visibility=_round(5 + rng.random() * 15),
        pressure=_round(1000 + rng.random() * 40),
        timestamp=datetime.now(timezone.utc).isoformat(),
        icon_code=icon_code_from_condition(base["condition"]),
        uv_index=_round(rng.random() * 11),
        cloud_cover=_round(rng.random() * 100),
    )


class WeatherService:
    # current weather per coordinate
    # lookup order: fresh cache, live api, stale cache, mock data
    # mock observations are never cached so a later call can still reach the api

    def __init__(
        self,
        client: Optional[AzureMapsWeatherClient],
        cache: Optional[TTLCache] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.client = client
        self.cache = cache or TTLCache(ttl=15 * 60)
        self.rng = rng or random.Random()
        if client is None:
            logger.warning("Azure Maps subscription key not configured, using mock weather data")

    def get_current_weather(self, latitude: float, longitude: float, region_name: str) -> WeatherObservation:
        cache_key = f"{latitude},{longitude}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        if self.client is None:
            return mock_weather(region_name, self.rng)

        try:
            payload = self.client.get_current_conditions(latitude, longitude)
            observation = parse_current_conditions(payload)
        except (APIClientError, ValueError) as exc:
            logger.error("Failed to fetch weather for %s: %s", region_name, exc)
            stale = self.cache.get(cache_key, allow_stale=True)
            if stale is not None:
                logger.info("Using cached weather data for %s due to API error", region_name)
                return stale
            logger.info("Using mock weather data for %s due to API error", region_name)
            return mock_weather(region_name, self.rng)

        self.cache.set(cache_key, observation)
        return observation
