"""Week-over-week and year-over-year comparison series.

Anchors:
- previous_day: date - 7 days (same weekday last week)
- previous_year: same calendar date one year earlier (29 Feb -> 28 Feb)

Anchors before the analyzed range come from a separately fetched history
index; anchors inside the range come from the aggregates themselves. Missing
anchors resolve to 0.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, timedelta

from app.features.analytics.aggregation import DailyAggregate
from app.features.analytics.repository import DateRange
from app.features.analytics.schemas import ComparisonPoint

WEEK_OFFSET = timedelta(days=7)

# Earliest start date whose week and year anchors are representable
EARLIEST_ANALYSIS_DATE = date(date.min.year + 1, 1, 1)


def shift_year(day: date, years: int = 1) -> date:
    """Same calendar date ``years`` earlier, clamping 29 Feb to 28 Feb.

    Raises:
        ValueError: If the result would fall before year 1.
    """
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def anchor_ranges(start: date, end: date) -> list[DateRange]:
    """Date ranges before ``start`` that hold comparison anchors.

    Ranges are merged so that no date is covered twice (overlapping fetches
    would double-count revenue).

    Args:
        start: First analyzed date.
        end: Last analyzed date.

    Returns:
        Sorted, non-overlapping ranges, all ending before ``start``.
    """
    day_before = start - timedelta(days=1)
    candidates = [
        DateRange(start - WEEK_OFFSET, day_before),
        DateRange(shift_year(start), min(shift_year(end), day_before)),
    ]
    candidates.sort(key=lambda r: r.start)

    merged: list[DateRange] = [candidates[0]]
    for current in candidates[1:]:
        last = merged[-1]
        if current.start <= last.end + timedelta(days=1):
            merged[-1] = DateRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def build_comparison_series(
    days: Sequence[DailyAggregate],
    history: Mapping[date, float] | None = None,
) -> list[ComparisonPoint]:
    """Build one comparison point per analyzed day.

    Args:
        days: Daily aggregates for the analyzed range.
        history: Revenue per date for anchors before the range (optional).

    Returns:
        Comparison points ordered by date.
    """
    revenue_by_date: dict[date, float] = dict(history or {})
    revenue_by_date.update((day.date, day.total_revenue) for day in days)

    return [
        ComparisonPoint(
            date=day.date,
            current=day.total_revenue,
            previous_day=revenue_by_date.get(day.date - WEEK_OFFSET, 0.0),
            previous_year=revenue_by_date.get(shift_year(day.date), 0.0),
            day_of_week=day.day_of_week,
            weather_condition=day.weather.category if day.weather is not None else None,
            has_event=day.has_event,
        )
        for day in sorted(days, key=lambda d: d.date)
    ]
