# connects settings -> services -> report and prints one block per region

from __future__ import annotations
import logging
from .config import Settings
from .cost import health_score_emoji, simple_explanation
from .models import RegionReport
from .service import build_services, compute_all
from .weather import weather_emoji


def format_report(report: RegionReport) -> str:
    region, weather, estimate = report.region, report.weather, report.estimate
    lines = [
        f"{health_score_emoji(estimate.health_score)} {region.display_name} "
        f"({region.country or region.geography}): {estimate.health_score.value.upper()} "
        f"index {estimate.final_index:.2f}, ~${estimate.estimated_monthly_cost}/month, "
        f"{weather_emoji(weather.condition)} {weather.condition} {weather.temperature:g}°C"
    ]
    for factor in estimate.factors:
        lines.append(f"    [{factor.impact.value}] {factor.factor}: {factor.description}")
    lines.append(f"    {simple_explanation(estimate.final_index)}")
    return "\n".join(lines)


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    catalog, weather = build_services(settings)
    regions = catalog.get_regions()
    # uses threads under the hood (ThreadPoolExecutor in service.compute_all)
    for report in compute_all(regions, weather, max_workers=settings.max_workers):
        print(format_report(report))


if __name__ == "__main__":
    main()
