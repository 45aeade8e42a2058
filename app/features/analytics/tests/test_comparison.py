"""Tests for the comparison series."""

from datetime import date, timedelta

from app.features.analytics.aggregation import build_daily_aggregates
from app.features.analytics.comparison import (
    EARLIEST_ANALYSIS_DATE,
    anchor_ranges,
    build_comparison_series,
    shift_year,
)
from app.features.analytics.repository import DateRange
from app.features.analytics.schemas import WeatherCategory


class TestShiftYear:
    def test_regular_date(self):
        assert shift_year(date(2024, 3, 15)) == date(2023, 3, 15)

    def test_leap_day_clamps_to_28th(self):
        assert shift_year(date(2024, 2, 29)) == date(2023, 2, 28)


class TestAnchorRanges:
    def test_earliest_analysis_date_has_valid_anchors(self):
        ranges = anchor_ranges(EARLIEST_ANALYSIS_DATE, EARLIEST_ANALYSIS_DATE + timedelta(days=2))

        assert ranges == [
            DateRange(date(1, 1, 1), date(1, 1, 3)),
            DateRange(date(1, 12, 25), date(1, 12, 31)),
        ]

    def test_short_range_has_week_and_year_windows(self):
        ranges = anchor_ranges(date(2024, 1, 1), date(2024, 1, 3))

        assert ranges == [
            DateRange(date(2023, 1, 1), date(2023, 1, 3)),
            DateRange(date(2023, 12, 25), date(2023, 12, 31)),
        ]

    def test_year_window_stops_before_start(self):
        """For ranges over a year the in-range anchors are not refetched."""
        ranges = anchor_ranges(date(2023, 1, 1), date(2024, 6, 30))

        assert all(r.end < date(2023, 1, 1) for r in ranges)
        assert ranges == [DateRange(date(2022, 1, 1), date(2022, 12, 31))]

    def test_ranges_never_overlap(self):
        start = date(2024, 1, 1)
        for span in (0, 6, 30, 364, 365, 366, 400, 729):
            ranges = anchor_ranges(start, start + timedelta(days=span))
            for earlier, later in zip(ranges, ranges[1:], strict=False):
                assert earlier.end < later.start


class TestBuildComparisonSeries:
    def test_empty_days(self):
        assert build_comparison_series([]) == []

    def test_one_point_per_day(self, sample_sales, sample_weather, sample_events):
        days = build_daily_aggregates(sample_sales, sample_weather, sample_events)

        points = build_comparison_series(days)

        assert len(points) == len(days)
        assert [p.date for p in points] == [d.date for d in days]
        assert [p.current for p in points] == [100000.0, 120000.0, 80000.0]
        assert all(p.previous_day == 0.0 and p.previous_year == 0.0 for p in points)
        assert [p.weather_condition for p in points] == [
            WeatherCategory.SUNNY,
            WeatherCategory.CLOUDY,
            WeatherCategory.RAINY,
        ]
        assert [p.has_event for p in points] == [False, True, False]

    def test_anchors_from_history(self, make_day):
        days = [make_day(date(2024, 1, 1), 500.0)]
        history = {date(2023, 12, 25): 400.0, date(2023, 1, 1): 300.0}

        (point,) = build_comparison_series(days, history)

        assert point.previous_day == 400.0
        assert point.previous_year == 300.0
        assert point.day_of_week == 0
        assert point.weather_condition is None

    def test_anchors_inside_range(self, make_day):
        """previous_day resolves against analyzed days too."""
        days = [make_day(date(2024, 1, 1), 100.0), make_day(date(2024, 1, 8), 150.0)]

        points = build_comparison_series(days)

        assert points[1].previous_day == 100.0
        assert points[0].previous_day == 0.0
