"""Tests for daily aggregation and weather classification."""

from datetime import date

import pytest

from app.features.analytics.aggregation import (
    build_daily_aggregates,
    build_revenue_index,
    classify_weather,
)
from app.features.analytics.schemas import WeatherCategory
from app.features.data_platform.schemas import EventRow, SalesRow, WeatherRow


class TestClassifyWeather:
    """Tests for classify_weather."""

    @pytest.mark.parametrize(
        ("condition", "expected"),
        [
            ("晴れ", WeatherCategory.SUNNY),
            ("曇り", WeatherCategory.CLOUDY),
            ("雨", WeatherCategory.RAINY),
            ("Clear sky", WeatherCategory.SUNNY),
            ("Overcast", WeatherCategory.CLOUDY),
            ("Light RAIN", WeatherCategory.RAINY),
            ("snow", WeatherCategory.OTHER),
        ],
    )
    def test_known_conditions(self, condition, expected):
        """Keywords are matched case-insensitively in any supported language."""
        assert classify_weather(condition) == expected

    def test_rain_takes_precedence(self):
        """Mixed conditions mentioning rain count as rainy."""
        assert classify_weather("晴れ時々雨") == WeatherCategory.RAINY
        assert classify_weather("cloudy with showers") == WeatherCategory.RAINY

    def test_missing_condition_is_other(self):
        """Empty or missing conditions map to OTHER."""
        assert classify_weather(None) == WeatherCategory.OTHER
        assert classify_weather("") == WeatherCategory.OTHER


class TestBuildDailyAggregates:
    """Tests for build_daily_aggregates."""

    def test_empty_sales_returns_empty_list(self, sample_weather, sample_events):
        """Weather and events alone never create analyzed days."""
        assert build_daily_aggregates([], sample_weather, sample_events) == []

    def test_one_aggregate_per_sales_date(self, sample_sales, sample_weather, sample_events):
        """Each sales date yields exactly one aggregate, sorted by date."""
        days = build_daily_aggregates(sample_sales, sample_weather, sample_events)

        assert [d.date for d in days] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
        assert [d.total_revenue for d in days] == [100000.0, 120000.0, 80000.0]
        assert [d.day_of_week for d in days] == [0, 1, 2]

    def test_sums_multiple_rows_per_day(self):
        """Rows from several stores on one date are folded together."""
        sales = [
            SalesRow(date=date(2024, 1, 1), store_id="a", revenue_ex_tax=100.0, footfall=10),
            SalesRow(
                date=date(2024, 1, 1),
                store_id="b",
                revenue_ex_tax=50.5,
                transactions=3,
                discounts=2.5,
                tax=5.0,
            ),
        ]

        (day,) = build_daily_aggregates(sales, [], [])

        assert day.total_revenue == pytest.approx(150.5)
        assert day.total_footfall == 10
        assert day.total_transactions == 3
        assert day.total_discounts == pytest.approx(2.5)
        assert day.total_tax == pytest.approx(5.0)
        assert day.sales_row_count == 2

    def test_attaches_weather_and_events(self, sample_sales, sample_weather, sample_events):
        """Weather and events are joined on date."""
        days = build_daily_aggregates(sample_sales, sample_weather, sample_events)

        assert [d.weather_category for d in days] == [
            WeatherCategory.SUNNY,
            WeatherCategory.CLOUDY,
            WeatherCategory.RAINY,
        ]
        assert [d.has_event for d in days] == [False, True, False]
        assert days[0].weather is not None
        assert days[0].weather.temp_avg == 5.0

    def test_day_without_weather(self, sample_sales):
        """Days with no weather observation keep weather None and category OTHER."""
        days = build_daily_aggregates(sample_sales, [], [])

        assert all(d.weather is None for d in days)
        assert all(d.weather_category == WeatherCategory.OTHER for d in days)

    def test_duplicate_weather_keeps_first_row(self, sample_sales):
        """A second observation for the same date is ignored."""
        weather = [
            WeatherRow(date=date(2024, 1, 1), location="tokyo", temp_avg=5.0, condition="晴れ"),
            WeatherRow(date=date(2024, 1, 1), location="osaka", temp_avg=9.0, condition="雨"),
        ]

        days = build_daily_aggregates(sample_sales, weather, [])

        assert days[0].weather is not None
        assert days[0].weather.temp_avg == 5.0
        assert days[0].weather_category == WeatherCategory.SUNNY

    def test_counts_multiple_events(self, sample_sales):
        """Several events on one date are counted."""
        events = [
            EventRow(date=date(2024, 1, 3), title="Concert"),
            EventRow(date=date(2024, 1, 3), title="Market"),
            EventRow(date=date(2024, 2, 1), title="Outside range"),
        ]

        days = build_daily_aggregates(sample_sales, [], events)

        assert [d.event_count for d in days] == [0, 0, 2]


def test_build_revenue_index_sums_per_date():
    """Revenue index sums rows per date."""
    sales = [
        SalesRow(date=date(2023, 1, 1), store_id="a", revenue_ex_tax=10.0),
        SalesRow(date=date(2023, 1, 1), store_id="b", revenue_ex_tax=15.0),
        SalesRow(date=date(2023, 1, 2), store_id="a", revenue_ex_tax=7.0),
    ]

    assert build_revenue_index(sales) == {date(2023, 1, 1): 25.0, date(2023, 1, 2): 7.0}
