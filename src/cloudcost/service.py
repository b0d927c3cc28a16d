# orchestration: wire clients and services, then assess every region concurrently
# use ThreadPoolExecutor so the per-region weather calls run in parallel
# the cost math itself stays in cost.py as pure functions

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Tuple
from .cache import TTLCache
from .client import AzureMapsWeatherClient, AzureManagementClient
from .config import Settings
from .cost import DEFAULT_CONFIG, CostModelConfig, calculate
from .models import RegionDescriptor, RegionReport
from .regions import RegionCatalog
from .weather import WeatherService

logger = logging.getLogger(__name__)


def build_services(settings: Settings) -> Tuple[RegionCatalog, WeatherService]:
    # clients are only created when their credentials exist; otherwise the services fall back
    weather_client = (
        AzureMapsWeatherClient(settings.maps_subscription_key)
        if settings.maps_subscription_key
        else None
    )
    management_client = (
        AzureManagementClient(settings.subscription_id, settings.access_token)
        if settings.live_regions_enabled
        else None
    )
    if management_client is None:
        logger.info("Azure access token not configured, using static region data")

    catalog = RegionCatalog(
        client=management_client,
        static_path=settings.static_regions_path,
        cache=TTLCache(ttl=settings.regions_ttl),
    )
    weather = WeatherService(weather_client, cache=TTLCache(ttl=settings.weather_ttl))
    return catalog, weather


# single region path: weather -> cost estimate
def assess_region(
    weather_service: WeatherService,
    region: RegionDescriptor,
    config: CostModelConfig = DEFAULT_CONFIG,
) -> RegionReport:
    # keeping this small makes it ideal as the function we submit to the thread pool
    if region.coordinates is None:
        raise ValueError(f"Region {region.name!r} has no coordinates")
    observation = weather_service.get_current_weather(
        region.coordinates.latitude,
        region.coordinates.longitude,
        region.display_name,
    )
    return RegionReport(region=region, weather=observation, estimate=calculate(observation, region, config))


def compute_all(
    regions: Iterable[RegionDescriptor],
    weather_service: WeatherService,
    max_workers: int = 4,
    config: CostModelConfig = DEFAULT_CONFIG,
) -> List[RegionReport]:
    results: List[RegionReport] = []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            pool.submit(assess_region, weather_service, region, config): region
            for region in regions
        }
        for fut in as_completed(futures):
            # allow exceptions to propagate (pytest/cli will display clear messages)
            results.append(fut.result())

    # ensure a stable ordering so cli output is deterministic and tests are easier to validate
    return sorted(results, key=lambda r: r.region.display_name.lower())
