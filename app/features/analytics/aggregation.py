"""Daily aggregation of raw sales joined with weather and events.

Produces one DailyAggregate per date that has at least one sales row.
Dates without sales are absent, never zero-filled.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from app.core.logging import get_logger
from app.features.analytics.schemas import WeatherCategory
from app.features.data_platform.schemas import EventRow, SalesRow, WeatherRow

logger = get_logger(__name__)

# Checked in this order; the first match wins ("晴れ時々雨" is rainy)
WEATHER_KEYWORDS: tuple[tuple[WeatherCategory, tuple[str, ...]], ...] = (
    (WeatherCategory.RAINY, ("rain", "shower", "drizzle", "storm", "thunder", "雨")),
    (WeatherCategory.CLOUDY, ("cloud", "overcast", "fog", "mist", "曇", "くもり")),
    (WeatherCategory.SUNNY, ("sun", "clear", "fair", "晴")),
)


def classify_weather(condition: str | None) -> WeatherCategory:
    """Map a free-text weather condition to a coarse category.

    Args:
        condition: Condition text as stored (any language/case).

    Returns:
        Weather category; OTHER for unknown or missing conditions.
    """
    if not condition:
        return WeatherCategory.OTHER
    text = condition.lower()
    for category, keywords in WEATHER_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return WeatherCategory.OTHER


@dataclass(frozen=True)
class WeatherSnapshot:
    """Weather attached to one analyzed day."""

    temp_avg: float | None
    humidity: float | None
    precipitation: float | None
    condition: str | None
    category: WeatherCategory

    @classmethod
    def from_row(cls, row: WeatherRow) -> WeatherSnapshot:
        return cls(
            temp_avg=row.temp_avg,
            humidity=row.humidity,
            precipitation=row.precipitation,
            condition=row.condition,
            category=classify_weather(row.condition),
        )


@dataclass
class DailyAggregate:
    """Sales totals for one date with its weather and event context.

    Attributes:
        date: Business date.
        day_of_week: 0=Monday, 6=Sunday.
        total_revenue: Sum of revenue_ex_tax.
        total_footfall: Sum of footfall (missing counted as 0).
        total_transactions: Sum of transactions (missing counted as 0).
        total_discounts: Sum of discounts (missing counted as 0).
        total_tax: Sum of tax.
        sales_row_count: Number of raw rows folded into this day.
        weather: Weather snapshot, None if no observation exists.
        event_count: Number of events on this date.
    """

    date: date
    day_of_week: int
    total_revenue: float = 0.0
    total_footfall: int = 0
    total_transactions: int = 0
    total_discounts: float = 0.0
    total_tax: float = 0.0
    sales_row_count: int = 0
    weather: WeatherSnapshot | None = None
    event_count: int = 0

    @property
    def has_event(self) -> bool:
        """True if at least one event matched this date."""
        return self.event_count > 0

    @property
    def weather_category(self) -> WeatherCategory:
        """Weather category, OTHER when no observation exists."""
        return self.weather.category if self.weather is not None else WeatherCategory.OTHER

    def add_sale(self, row: SalesRow) -> None:
        self.total_revenue += row.revenue_ex_tax
        self.total_footfall += row.footfall or 0
        self.total_transactions += row.transactions or 0
        self.total_discounts += row.discounts or 0.0
        self.total_tax += row.tax
        self.sales_row_count += 1


def build_daily_aggregates(
    sales: Sequence[SalesRow],
    weather: Sequence[WeatherRow],
    events: Sequence[EventRow],
) -> list[DailyAggregate]:
    """Fold raw rows into one aggregate per sales date.

    Args:
        sales: Raw sales rows (any order, several per day allowed).
        weather: Weather rows; at most one per date is expected.
        events: Event rows; proximity filtering already applied upstream.

    Returns:
        Aggregates sorted by date. Empty when there are no sales rows.
    """
    if not sales:
        return []

    by_date: dict[date, DailyAggregate] = {}
    for row in sales:
        aggregate = by_date.get(row.date)
        if aggregate is None:
            aggregate = DailyAggregate(date=row.date, day_of_week=row.date.weekday())
            by_date[row.date] = aggregate
        aggregate.add_sale(row)

    for weather_row in weather:
        aggregate = by_date.get(weather_row.date)
        if aggregate is None:
            continue
        if aggregate.weather is not None:
            logger.warning(
                "analytics.duplicate_weather_row",
                date=str(weather_row.date),
                location=weather_row.location,
            )
            continue
        aggregate.weather = WeatherSnapshot.from_row(weather_row)

    for event in events:
        aggregate = by_date.get(event.date)
        if aggregate is not None:
            aggregate.event_count += 1

    return [by_date[day] for day in sorted(by_date)]


def build_revenue_index(sales: Iterable[SalesRow]) -> dict[date, float]:
    """Sum revenue per date.

    Used for comparison anchors that lie outside the analyzed range.
    """
    index: dict[date, float] = defaultdict(float)
    for row in sales:
        index[row.date] += row.revenue_ex_tax
    return dict(index)
