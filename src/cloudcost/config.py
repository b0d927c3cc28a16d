# environment-driven settings, read once at startup and passed down explicitly

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()  # in production, environment variables are injected by docker, kubernetes, cloud provider

BUNDLED_REGIONS_PATH = Path(__file__).parent / "data" / "az.json"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from exc


@dataclass(frozen=True)
class Settings:
    maps_subscription_key: str | None = None
    subscription_id: str | None = None
    access_token: str | None = None
    static_regions_path: Path = BUNDLED_REGIONS_PATH
    max_workers: int = 4
    log_level: str = "INFO"
    weather_ttl: int = 15 * 60
    regions_ttl: int = 60 * 60

    @classmethod
    def from_env(cls) -> "Settings":
        # empty strings count as unset so a blank line in .env does not enable a client
        static_path = os.getenv("CLOUDCOST_STATIC_REGIONS")
        return cls(
            maps_subscription_key=os.getenv("AZURE_MAPS_SUBSCRIPTION_KEY") or None,
            subscription_id=os.getenv("AZURE_SUBSCRIPTION_ID") or None,
            access_token=os.getenv("AZURE_ACCESS_TOKEN") or None,
            static_regions_path=Path(static_path) if static_path else BUNDLED_REGIONS_PATH,
            max_workers=_env_int("CLOUDCOST_MAX_WORKERS", 4),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            weather_ttl=_env_int("CLOUDCOST_WEATHER_TTL", 15 * 60),
            regions_ttl=_env_int("CLOUDCOST_REGIONS_TTL", 60 * 60),
        )

    @property
    def live_regions_enabled(self) -> bool:
        return bool(self.subscription_id and self.access_token)
