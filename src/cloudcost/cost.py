# cost estimation model: weather observation + region -> cost index, health score and explanations
# everything here is pure, no i/o and no shared mutable state, so any number of threads may call it

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Union
from .models import (
    CostEstimate,
    FactorExplanation,
    HealthScore,
    Impact,
    RegionDescriptor,
    WeatherObservation,
    round_half_up,
)


@dataclass(frozen=True)
class HealthThresholds:
    # upper-exclusive bounds on the final index
    excellent: float = 1.2
    good: float = 1.5
    fair: float = 1.8


@dataclass(frozen=True)
class CostModelConfig:
    ideal_temperature: float = 20.0          # celsius, optimal data center intake temperature
    temperature_sensitivity: float = 0.05    # cost increase per degree of deviation
    humidity_threshold: float = 60.0         # percent
    humidity_penalty: float = 1.2            # flat multiplier above the threshold
    base_electricity_price: float = 0.10     # USD per kWh baseline
    wind_cooling_threshold: float = 10.0     # m/s
    wind_cooling_multiplier: float = 0.95    # flat discount above the threshold
    health_thresholds: HealthThresholds = field(default_factory=HealthThresholds)
    base_server_cost: float = 100            # USD per month for a standard server
    temperature_explanation_delta: float = 5.0


DEFAULT_CONFIG = CostModelConfig()


@dataclass(frozen=True)
class FactorSet:
    # unrounded factors, handed to the explanation generator
    temperature: float
    humidity: float
    electricity: float
    wind: float

    @property
    def product(self) -> float:
        return self.temperature * self.humidity * self.electricity * self.wind


def temperature_factor(temperature: float, config: CostModelConfig = DEFAULT_CONFIG) -> float:
    # linear and symmetric around the ideal temperature
    delta = abs(temperature - config.ideal_temperature)
    return 1 + delta * config.temperature_sensitivity


def humidity_factor(humidity: float, config: CostModelConfig = DEFAULT_CONFIG) -> float:
    # step function, the size of the excess does not matter
    return config.humidity_penalty if humidity > config.humidity_threshold else 1.0


def electricity_factor(price: float, config: CostModelConfig = DEFAULT_CONFIG) -> float:
    return price / config.base_electricity_price


def wind_factor(wind_speed: float, config: CostModelConfig = DEFAULT_CONFIG) -> float:
    return config.wind_cooling_multiplier if wind_speed > config.wind_cooling_threshold else 1.0


def compute_factors(
    observation: WeatherObservation,
    region: RegionDescriptor,
    config: CostModelConfig = DEFAULT_CONFIG,
) -> FactorSet:
    return FactorSet(
        temperature=temperature_factor(observation.temperature, config),
        humidity=humidity_factor(observation.humidity, config),
        electricity=electricity_factor(region.electricity_price, config),
        wind=wind_factor(observation.wind_speed, config),
    )


def classify_health(final_index: float, config: CostModelConfig = DEFAULT_CONFIG) -> HealthScore:
    t = config.health_thresholds
    if final_index < t.excellent:
        return HealthScore.EXCELLENT
    if final_index < t.good:
        return HealthScore.GOOD
    if final_index < t.fair:
        return HealthScore.FAIR
    return HealthScore.POOR


def estimate_monthly_cost(final_index: float, config: CostModelConfig = DEFAULT_CONFIG) -> int:
    return int(round_half_up(config.base_server_cost * final_index, 0))


def _fmt(value: float) -> str:
    # 35.0 -> "35", 0.123456789 -> "0.123456789"; every digit of the input is kept
    if float(value).is_integer():
        return str(int(value))
    return repr(value)


def explain_factors(
    observation: WeatherObservation,
    region: RegionDescriptor,
    factors: FactorSet,
    config: CostModelConfig = DEFAULT_CONFIG,
) -> List[FactorExplanation]:
    # order is fixed (temperature, humidity, electricity, wind); each entry is independent
    explanations: List[FactorExplanation] = []

    temp_delta = abs(observation.temperature - config.ideal_temperature)
    if temp_delta > config.temperature_explanation_delta:
        direction = "higher" if observation.temperature > config.ideal_temperature else "lower"
        explanations.append(FactorExplanation(
            factor="Temperature",
            impact=Impact.INCREASES if factors.temperature > 1 else Impact.NEUTRAL,
            description=(
                f"{_fmt(observation.temperature)}°C is {int(round_half_up(temp_delta, 0))}°C "
                f"{direction} than ideal ({_fmt(config.ideal_temperature)}°C)"
            ),
        ))

    if observation.humidity > config.humidity_threshold:
        explanations.append(FactorExplanation(
            factor="Humidity",
            impact=Impact.INCREASES,
            description=f"High humidity ({_fmt(observation.humidity)}%) reduces cooling efficiency",
        ))

    if factors.electricity != 1.0:
        higher = factors.electricity > 1
        explanations.append(FactorExplanation(
            factor="Electricity Cost",
            impact=Impact.INCREASES if higher else Impact.DECREASES,
            description=(
                f"Regional electricity cost (${_fmt(region.electricity_price)}/kWh) is "
                f"{'higher' if higher else 'lower'} than baseline"
            ),
        ))

    if factors.wind < 1.0:
        explanations.append(FactorExplanation(
            factor="Wind",
            impact=Impact.DECREASES,
            description=f"High wind speed ({_fmt(observation.wind_speed)} m/s) helps with natural cooling",
        ))

    return explanations


def calculate(
    observation: WeatherObservation,
    region: RegionDescriptor,
    config: CostModelConfig = DEFAULT_CONFIG,
) -> CostEstimate:
    factors = compute_factors(observation, region, config)
    final_index = factors.product

    # rounding is for display only; classification and cost use the raw index
    return CostEstimate(
        temperature_factor=round_half_up(factors.temperature),
        humidity_factor=round_half_up(factors.humidity),
        electricity_factor=round_half_up(factors.electricity),
        wind_factor=round_half_up(factors.wind),
        final_index=round_half_up(final_index),
        health_score=classify_health(final_index, config),
        estimated_monthly_cost=estimate_monthly_cost(final_index, config),
        factors=tuple(explain_factors(observation, region, factors, config)),
    )


def simple_explanation(final_index: float) -> str:
    # these tiers are a separate presentation scale, not the health thresholds
    if final_index < 1.1:
        return "Great conditions! This region has optimal weather for data center operations."
    if final_index < 1.3:
        return "Good conditions with minor cost impacts from weather."
    if final_index < 1.6:
        return "Fair conditions. Weather factors moderately increase operating costs."
    return "Challenging conditions. Weather significantly impacts data center efficiency."


HEALTH_SCORE_COLORS: Mapping[HealthScore, str] = {
    HealthScore.EXCELLENT: "#27ae60",
    HealthScore.GOOD: "#f39c12",
    HealthScore.FAIR: "#e67e22",
    HealthScore.POOR: "#e74c3c",
}
DEFAULT_HEALTH_COLOR = "#95a5a6"

HEALTH_SCORE_EMOJI: Mapping[HealthScore, str] = {
    HealthScore.EXCELLENT: "🟢",
    HealthScore.GOOD: "🟡",
    HealthScore.FAIR: "🟠",
    HealthScore.POOR: "🔴",
}
DEFAULT_HEALTH_EMOJI = "⚪"


def _as_score(score: Union[HealthScore, str, None]) -> Optional[HealthScore]:
    try:
        return HealthScore(score)
    except ValueError:
        return None


def health_score_color(score: Union[HealthScore, str, None]) -> str:
    return HEALTH_SCORE_COLORS.get(_as_score(score), DEFAULT_HEALTH_COLOR)


def health_score_emoji(score: Union[HealthScore, str, None]) -> str:
    return HEALTH_SCORE_EMOJI.get(_as_score(score), DEFAULT_HEALTH_EMOJI)
