#!/usr/bin/env python
"""Demo script for correlation analysis without a database.

Usage:
    uv run python examples/correlation_demo.py

This script demonstrates how to:
1. Load sales, weather and event rows into an in-memory repository
2. Run a correlation analysis and print the strongest factors
3. Measure one run against the response-time target
"""

import asyncio
import json
import random
from datetime import date, timedelta

from app.core.logging import configure_logging
from app.features.analytics import CorrelationService, InMemoryCorrelationRepository
from app.features.data_platform import EventRow, SalesRow, WeatherRow

START = date(2024, 6, 1)
DAYS = 90


def build_repository(seed: int = 7) -> InMemoryCorrelationRepository:
    """Generate three months of sales that rise with temperature and events.

    Args:
        seed: Random seed.

    Returns:
        Repository holding the generated rows.
    """
    rng = random.Random(seed)
    sales: list[SalesRow] = []
    weather: list[WeatherRow] = []
    events: list[EventRow] = []

    for offset in range(DAYS):
        day = START + timedelta(days=offset)
        temp = rng.uniform(18.0, 34.0)
        raining = rng.random() < 0.3
        has_event = day.weekday() == 5 and rng.random() < 0.5

        weather.append(
            WeatherRow(
                date=day,
                location="tokyo",
                temp_avg=round(temp, 1),
                humidity=round(rng.uniform(50.0, 90.0), 1),
                precipitation=round(rng.uniform(1.0, 40.0), 1) if raining else 0.0,
                condition="雨" if raining else rng.choice(["晴れ", "曇り"]),
            )
        )
        if has_event:
            events.append(EventRow(date=day, title="Summer festival", distance_km=0.8))

        revenue = 80000 + temp * 1500 - (15000 if raining else 0) + (25000 if has_event else 0)
        for store in ("store1", "store2"):
            sales.append(
                SalesRow(
                    date=day,
                    store_id=store,
                    department="beverages",
                    revenue_ex_tax=round(revenue + rng.uniform(-8000.0, 8000.0), 2),
                    footfall=rng.randint(200, 600),
                    transactions=rng.randint(100, 300),
                )
            )

    return InMemoryCorrelationRepository(sales, weather, events)


async def main() -> None:
    configure_logging()
    service = CorrelationService(build_repository())
    filters = {
        "start_date": START.isoformat(),
        "end_date": (START + timedelta(days=DAYS - 1)).isoformat(),
    }

    result = await service.analyze_correlations(filters)

    print(f"Analyzed days: {result.summary.total_analyzed_days}")
    print(f"Average daily sales: {result.summary.average_daily_sales:,.0f}")
    print()
    print("Correlations:")
    for item in result.correlations:
        print(f"  {item.factor:<20} r={item.correlation:+.3f}  {item.significance.value}")
    print()
    if result.summary.strongest_positive:
        print(f"Strongest positive: {result.summary.strongest_positive.description}")
    if result.summary.strongest_negative:
        print(f"Strongest negative: {result.summary.strongest_negative.description}")
    print()
    print("Heatmap (first 5 cells):")
    print(json.dumps([cell.model_dump(mode="json") for cell in result.heatmap_data[:5]], indent=2))

    report = await service.performance_test(filters)
    print()
    print(
        f"Performance: {report.response_time_ms:.1f} ms, "
        f"{report.data_size_bytes} bytes, within SLA: {report.within_sla}"
    )


if __name__ == "__main__":
    asyncio.run(main())
