# dags/region_cost_index_dag.py
from __future__ import annotations
from datetime import datetime, timedelta
from typing import List
from airflow.decorators import dag, task
from airflow.exceptions import AirflowFailException
from cloudcost.config import Settings
from cloudcost.cost import health_score_emoji
from cloudcost.service import assess_region, build_services


@dag(
    dag_id="region_cost_index",
    start_date=datetime(2025, 1, 1),
    schedule="0 6 * * *",
    catchup=False,
    default_args={"owner": "alex-eng", "retries": 1, "retry_delay": timedelta(minutes=2)},
    tags=["weather", "cost-index"],
)
def region_cost_index():
    @task
    def list_regions() -> List[str]:
        catalog, _ = build_services(Settings.from_env())
        regions = catalog.get_regions()
        if not regions:
            raise AirflowFailException("region catalog returned no regions")
        return [r.name for r in regions]

    @task(pool="azuremaps", execution_timeout=timedelta(seconds=30))
    def assess(region_name: str) -> dict:
        # each mapped task runs in its own process, so rebuild the services here
        catalog, weather = build_services(Settings.from_env())
        by_name = {r.name: r for r in catalog.get_regions()}
        region = by_name.get(region_name)
        if region is None:
            raise AirflowFailException(f"assess({region_name}) region no longer in catalog")

        try:
            report = assess_region(weather, region)
        except Exception as e:
            raise AirflowFailException(f"assess({region_name}) failed: {e}")

        return {
            "region": region.display_name,
            "temperature": report.weather.temperature,
            "condition": report.weather.condition,
            **report.estimate.to_dict(),
        }

    @task
    def publish(rows: List[dict]) -> None:
        for r in sorted(rows, key=lambda x: x["region"].lower()):
            print(
                f"{health_score_emoji(r['healthScore'])} {r['region']}: "
                f"{r['healthScore'].upper()} index {r['finalIndex']:.2f} "
                f"(~${r['estimatedMonthlyCost']}/month, {r['condition']} {r['temperature']}°C)"
            )

    publish(assess.expand(region_name=list_regions()))


dag = region_cost_index()
