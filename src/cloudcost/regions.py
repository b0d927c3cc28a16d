# region catalog: live locations from Azure Resource Manager, then the bundled static file,
# then a minimal hard-coded list, enriched with electricity price, timezone and country

from __future__ import annotations
import json
import logging
import math
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union
from .cache import TTLCache
from .client import APIClientError, AzureManagementClient
from .config import BUNDLED_REGIONS_PATH
from .models import Coordinates, RegionDescriptor

logger = logging.getLogger(__name__)

# approximate values in USD/kWh
ELECTRICITY_PRICING: Mapping[str, float] = {
    "eastus": 0.12,
    "eastus2": 0.12,
    "westus": 0.18,
    "westus2": 0.16,
    "westus3": 0.16,
    "centralus": 0.11,
    "southcentralus": 0.10,
    "northcentralus": 0.11,
    "northeurope": 0.22,
    "westeurope": 0.25,
    "uksouth": 0.26,
    "ukwest": 0.26,
    "francecentral": 0.24,
    "germanywestcentral": 0.28,
    "norwayeast": 0.30,
    "swedencentral": 0.32,
    "eastasia": 0.14,
    "southeastasia": 0.15,
    "japaneast": 0.24,
    "japanwest": 0.24,
    "australiaeast": 0.28,
    "australiasoutheast": 0.28,
    "australiacentral": 0.28,
    "koreacentral": 0.19,
    "koreasouth": 0.19,
    "canadacentral": 0.11,
    "canadaeast": 0.11,
    "brazilsouth": 0.16,
    "southindia": 0.08,
    "centralindia": 0.08,
    "westindia": 0.08,
    "southafricanorth": 0.14,
    "uaenorth": 0.20,
}
DEFAULT_ELECTRICITY_PRICE = 0.15

TIMEZONES: Mapping[str, str] = {
    "eastus": "America/New_York",
    "eastus2": "America/New_York",
    "westus": "America/Los_Angeles",
    "westus2": "America/Los_Angeles",
    "westus3": "America/Los_Angeles",
    "centralus": "America/Chicago",
    "southcentralus": "America/Chicago",
    "northcentralus": "America/Chicago",
    "canadacentral": "America/Toronto",
    "canadaeast": "America/Halifax",
    "brazilsouth": "America/Sao_Paulo",
    "northeurope": "Europe/Dublin",
    "westeurope": "Europe/Amsterdam",
    "uksouth": "Europe/London",
    "ukwest": "Europe/London",
    "francecentral": "Europe/Paris",
    "germanywestcentral": "Europe/Berlin",
    "norwayeast": "Europe/Oslo",
    "swedencentral": "Europe/Stockholm",
    "eastasia": "Asia/Hong_Kong",
    "southeastasia": "Asia/Singapore",
    "japaneast": "Asia/Tokyo",
    "japanwest": "Asia/Tokyo",
    "australiaeast": "Australia/Sydney",
    "australiasoutheast": "Australia/Melbourne",
    "australiacentral": "Australia/Sydney",
    "southindia": "Asia/Kolkata",
    "centralindia": "Asia/Kolkata",
    "westindia": "Asia/Kolkata",
    "koreacentral": "Asia/Seoul",
    "koreasouth": "Asia/Seoul",
    "southafricanorth": "Africa/Johannesburg",
    "uaenorth": "Asia/Dubai",
}

# geographies that need a different label; anything else is used as-is
COUNTRIES: Mapping[str, str] = {
    "Korea": "South Korea",
    "UAE": "United Arab Emirates",
}

MINIMAL_FALLBACK_REGIONS: Sequence[RegionDescriptor] = (
    RegionDescriptor(
        name="eastus",
        display_name="East US",
        regional_display_name="(US) East US",
        coordinates=Coordinates(latitude=37.3719, longitude=-78.8964),
        physical_location="Virginia",
        geography="United States",
        electricity_price=0.12,
        timezone="America/New_York",
        country="United States",
    ),
    RegionDescriptor(
        name="westeurope",
        display_name="West Europe",
        regional_display_name="(Europe) West Europe",
        coordinates=Coordinates(latitude=52.3667, longitude=4.9),
        physical_location="Netherlands",
        geography="Europe",
        electricity_price=0.25,
        timezone="Europe/Amsterdam",
        country="Netherlands",
    ),
    RegionDescriptor(
        name="southeastasia",
        display_name="Southeast Asia",
        regional_display_name="(Asia Pacific) Southeast Asia",
        coordinates=Coordinates(latitude=1.283, longitude=103.833),
        physical_location="Singapore",
        geography="Asia Pacific",
        electricity_price=0.15,
        timezone="Asia/Singapore",
        country="Singapore",
    ),
)


def timezone_for_region(name: str) -> str:
    return TIMEZONES.get(name, "UTC")


def country_for_geography(geography: str) -> str:
    return COUNTRIES.get(geography, geography)


def _parse_coordinate(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) else value


def parse_regions(payload: Mapping[str, Any]) -> List[RegionDescriptor]:
    # management api shape: payload["value"][i] with "metadata" holding regionType and coordinates
    try:
        entries = payload["value"]
    except (KeyError, TypeError) as exc:
        raise ValueError("Unsupported payload shape for parse_regions(): missing value") from exc

    regions: List[RegionDescriptor] = []
    for entry in entries:
        try:
            region = _parse_region(entry)
        except (KeyError, AttributeError, TypeError) as exc:
            raise ValueError(f"Malformed region entry {entry!r}: {exc}") from exc
        if region is not None:
            regions.append(region)
    return regions


def _parse_region(entry: Mapping[str, Any]) -> Optional[RegionDescriptor]:
    metadata = entry.get("metadata") or {}
    # logical regions (edge zones, staging) have no physical datacenter to cool
    if metadata.get("regionType") != "Physical":
        return None

    latitude = _parse_coordinate(metadata.get("latitude"))
    longitude = _parse_coordinate(metadata.get("longitude"))
    if latitude is None or longitude is None:
        logger.debug("Skipping region %s without usable coordinates", entry.get("name"))
        return None

    name = entry["name"]
    geography = metadata.get("geography", "")
    display_name = entry.get("displayName", name)
    return RegionDescriptor(
        name=name,
        display_name=display_name,
        regional_display_name=entry.get("regionalDisplayName") or display_name,
        coordinates=Coordinates(latitude=latitude, longitude=longitude),
        physical_location=metadata.get("physicalLocation", ""),
        geography=geography,
        electricity_price=ELECTRICITY_PRICING.get(name, DEFAULT_ELECTRICITY_PRICE),
        timezone=timezone_for_region(name),
        country=country_for_geography(geography),
    )


def load_static_regions(path: Union[str, Path] = BUNDLED_REGIONS_PATH) -> List[RegionDescriptor]:
    # same payload shape as the live api, so the same parser applies
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_regions(payload)


class RegionCatalog:
    # physical cloud regions with the attributes the cost model needs
    # only live results are cached; static and minimal fallbacks are rebuilt on every call

    CACHE_KEY = "azure_regions"

    def __init__(
        self,
        client: Optional[AzureManagementClient] = None,
        static_path: Union[str, Path] = BUNDLED_REGIONS_PATH,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.client = client
        self.static_path = Path(static_path)
        self.cache = cache or TTLCache(ttl=60 * 60)

    def get_regions(self) -> List[RegionDescriptor]:
        cached = self.cache.get(self.CACHE_KEY)
        if cached is not None:
            logger.info("Using cached region data")
            return list(cached)

        if self.client is not None:
            try:
                regions = parse_regions(self.client.list_locations())
            except (APIClientError, ValueError) as exc:
                logger.error("Failed to fetch regions from Azure Management API: %s", exc)
                logger.info("Falling back to static region data")
            else:
                # stored as a tuple so callers cannot mutate the cached list
                self.cache.set(self.CACHE_KEY, tuple(regions))
                logger.info("Loaded %d regions from Azure Management API", len(regions))
                return regions

        try:
            regions = load_static_regions(self.static_path)
        except (OSError, ValueError) as exc:
            logger.error("Failed to load static regions from %s: %s", self.static_path, exc)
            return list(MINIMAL_FALLBACK_REGIONS)

        logger.info("Loaded %d regions from static data", len(regions))
        return regions
