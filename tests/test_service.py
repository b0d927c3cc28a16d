# orchestration tests: fan-out over regions, ordering, wiring from settings and cli formatting

from pathlib import Path
import pytest
from cloudcost.cli import format_report
from cloudcost.client import AzureManagementClient, AzureMapsWeatherClient
from cloudcost.config import BUNDLED_REGIONS_PATH, Settings
from cloudcost.models import Coordinates, HealthScore, RegionDescriptor, WeatherObservation
from cloudcost.service import assess_region, build_services, compute_all


class FixedWeather:
    # stands in for WeatherService: same observation for every coordinate
    def __init__(self, observation: WeatherObservation) -> None:
        self.observation = observation
        self.requests = []

    def get_current_weather(self, latitude, longitude, region_name):
        self.requests.append((latitude, longitude, region_name))
        return self.observation


def make_region(name, display_name, price):
    return RegionDescriptor(
        name=name,
        display_name=display_name,
        electricity_price=price,
        coordinates=Coordinates(latitude=10.0, longitude=20.0),
        country="Testland",
    )


MILD = WeatherObservation(temperature=20, humidity=50, wind_speed=5, condition="Clear")


def test_assess_region_uses_region_coordinates():
    weather = FixedWeather(MILD)
    report = assess_region(weather, make_region("westeurope", "West Europe", 0.25))

    assert weather.requests == [(10.0, 20.0, "West Europe")]
    assert report.weather is MILD
    assert report.estimate.electricity_factor == 2.5
    assert report.estimate.health_score is HealthScore.POOR


def test_assess_region_requires_coordinates():
    region = RegionDescriptor(name="nowhere", display_name="Nowhere", electricity_price=0.1)
    with pytest.raises(ValueError):
        assess_region(FixedWeather(MILD), region)


def test_compute_all_returns_sorted_reports():
    regions = [
        make_region("westeurope", "West Europe", 0.25),
        make_region("eastus", "East US", 0.12),
        make_region("brazilsouth", "Brazil South", 0.16),
    ]
    results = compute_all(regions, FixedWeather(MILD), max_workers=3)

    assert [r.region.display_name for r in results] == ["Brazil South", "East US", "West Europe"]
    assert [r.estimate.estimated_monthly_cost for r in results] == [160, 120, 250]


def test_compute_all_propagates_worker_errors():
    class Broken:
        def get_current_weather(self, latitude, longitude, region_name):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        compute_all([make_region("eastus", "East US", 0.12)], Broken())


def test_build_services_without_credentials_uses_fallbacks():
    catalog, weather = build_services(Settings())

    assert catalog.client is None
    assert catalog.static_path == BUNDLED_REGIONS_PATH
    assert weather.client is None


def test_build_services_with_credentials_creates_clients(tmp_path):
    settings = Settings(
        maps_subscription_key="maps-key",
        subscription_id="sub-123",
        access_token="token",
        static_regions_path=tmp_path / "az.json",
        weather_ttl=60,
        regions_ttl=120,
    )
    catalog, weather = build_services(settings)

    assert isinstance(catalog.client, AzureManagementClient)
    assert isinstance(weather.client, AzureMapsWeatherClient)
    assert catalog.static_path == Path(tmp_path / "az.json")
    assert weather.cache.ttl == 60
    assert catalog.cache.ttl == 120


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("AZURE_MAPS_SUBSCRIPTION_KEY", "maps-key")
    monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "")
    monkeypatch.setenv("CLOUDCOST_MAX_WORKERS", "8")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.delenv("AZURE_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("CLOUDCOST_STATIC_REGIONS", raising=False)

    settings = Settings.from_env()

    assert settings.maps_subscription_key == "maps-key"
    assert settings.subscription_id is None
    assert settings.live_regions_enabled is False
    assert settings.max_workers == 8
    assert settings.log_level == "DEBUG"
    assert settings.static_regions_path == BUNDLED_REGIONS_PATH


def test_settings_rejects_non_integer(monkeypatch):
    monkeypatch.setenv("CLOUDCOST_WEATHER_TTL", "soon")
    with pytest.raises(ValueError, match="CLOUDCOST_WEATHER_TTL"):
        Settings.from_env()


def test_format_report_lists_factors():
    hot = WeatherObservation(temperature=35, humidity=85, wind_speed=3, condition="Clear")
    report = assess_region(FixedWeather(hot), make_region("southindia", "South India", 0.25))

    text = format_report(report)
    lines = text.splitlines()

    assert lines[0].startswith("🔴 South India (Testland): POOR index 5.25, ~$525/month")
    assert "[increases] Temperature: 35°C is 15°C higher than ideal (20°C)" in lines[1]
    assert len(lines) == 5
    assert lines[-1].strip().startswith("Challenging conditions")
