"""Weekday x weather heatmap builder."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from app.features.analytics.aggregation import DailyAggregate
from app.features.analytics.schemas import HeatmapCell, WeatherCategory

WEEKDAY_SHORT_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

WEATHER_AXIS: tuple[WeatherCategory, ...] = (
    WeatherCategory.SUNNY,
    WeatherCategory.CLOUDY,
    WeatherCategory.RAINY,
    WeatherCategory.OTHER,
)


def build_heatmap(days: Sequence[DailyAggregate]) -> list[HeatmapCell]:
    """Average daily revenue per (weekday, weather category) cell.

    Days without weather fall into the OTHER row. Cells with no days are
    omitted, so every emitted value comes from observed data.

    Args:
        days: Daily aggregates.

    Returns:
        Cells ordered Monday..Sunday, then sunny, cloudy, rainy, other.
    """
    if not days:
        return []

    overall_average = sum(day.total_revenue for day in days) / len(days)

    revenue_by_cell: dict[tuple[int, WeatherCategory], list[float]] = defaultdict(list)
    for day in days:
        revenue_by_cell[(day.day_of_week, day.weather_category)].append(day.total_revenue)

    cells: list[HeatmapCell] = []
    for weekday, short_name in enumerate(WEEKDAY_SHORT_NAMES):
        for category in WEATHER_AXIS:
            revenues = revenue_by_cell.get((weekday, category))
            if not revenues:
                continue
            average = sum(revenues) / len(revenues)
            cells.append(
                HeatmapCell(
                    x=short_name,
                    y=category,
                    value=average,
                    sample_size=len(revenues),
                    relative_index=average / overall_average if overall_average > 0 else 0.0,
                )
            )
    return cells
