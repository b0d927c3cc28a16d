# models and a tiny rounding helper to keep data shapes explicit and reusable across the app

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class HealthScore(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Impact(str, Enum):
    INCREASES = "increases"
    DECREASES = "decreases"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class WeatherObservation:
    # immutable value object for the current conditions at one coordinate
    # only temperature, humidity and wind_speed feed the cost math, the rest is for display
    temperature: float
    humidity: float
    wind_speed: float
    condition: str = "Unknown"
    description: str = ""
    visibility: Optional[float] = None
    pressure: Optional[float] = None
    timestamp: Optional[str] = None
    icon_code: Optional[int] = None
    uv_index: float = 0
    cloud_cover: float = 0


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class RegionDescriptor:
    # cloud region as delivered by the catalog; electricity_price is the only field the cost model reads
    name: str
    display_name: str
    electricity_price: float
    regional_display_name: str = ""
    coordinates: Optional[Coordinates] = None
    physical_location: str = ""
    geography: str = ""
    timezone: str = "UTC"
    country: str = ""

    @property
    def id(self) -> str:
        return self.name


@dataclass(frozen=True)
class FactorExplanation:
    factor: str
    impact: Impact
    description: str


@dataclass(frozen=True)
class CostEstimate:
    # output value object; factor values are display-rounded to 2 places
    temperature_factor: float
    humidity_factor: float
    electricity_factor: float
    wind_factor: float
    final_index: float
    health_score: HealthScore
    estimated_monthly_cost: int
    factors: Tuple[FactorExplanation, ...] = ()
    base_index: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        # plain types only, so the result can cross json / xcom boundaries
        return {
            "baseIndex": self.base_index,
            "temperatureFactor": self.temperature_factor,
            "humidityFactor": self.humidity_factor,
            "electricityFactor": self.electricity_factor,
            "windFactor": self.wind_factor,
            "finalIndex": self.final_index,
            "healthScore": self.health_score.value,
            "estimatedMonthlyCost": self.estimated_monthly_cost,
            "factors": [
                {"factor": f.factor, "impact": f.impact.value, "description": f.description}
                for f in self.factors
            ],
        }


@dataclass(frozen=True)
class RegionReport:
    # one row of the final report: the region, the weather used and the resulting estimate
    region: RegionDescriptor
    weather: WeatherObservation
    estimate: CostEstimate


def round_half_up(value: float, places: int = 2) -> float:
    # halves go toward +inf (0.125 -> 0.13, -0.125 -> -0.12), unlike round() which rounds half to even
    scale = 10 ** places
    return math.floor(value * scale + 0.5) / scale
