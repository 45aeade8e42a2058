"""Tests for the correlation engine."""

import math
from datetime import date, timedelta

import pytest

from app.features.analytics.aggregation import build_daily_aggregates
from app.features.analytics.correlation import (
    CORRELATION_FACTORS,
    ComputationError,
    FactorDefinition,
    calculate_correlations,
    classify_significance,
    evaluate_factor,
    pearson_correlation,
)
from app.features.analytics.schemas import SignificanceLevel


class TestPearsonCorrelation:
    """Tests for pearson_correlation."""

    def test_perfect_positive(self):
        assert pearson_correlation([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert pearson_correlation([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)

    def test_known_value(self):
        """Temperature vs. sample revenue."""
        r = pearson_correlation([5.0, 8.0, 3.0], [100000.0, 120000.0, 80000.0])
        assert r == pytest.approx(0.9934, abs=1e-4)

    def test_result_is_clipped(self):
        """Floating-point overshoot never leaves [-1, 1]."""
        x = [0.1 * i for i in range(50)]
        r = pearson_correlation(x, [3 * v + 0.3 for v in x])
        assert -1.0 <= r <= 1.0

    def test_too_few_points(self):
        with pytest.raises(ComputationError):
            pearson_correlation([1.0], [2.0])

    def test_empty_series(self):
        with pytest.raises(ComputationError):
            pearson_correlation([], [])

    def test_constant_factor(self):
        with pytest.raises(ComputationError):
            pearson_correlation([1.0, 1.0, 1.0], [1.0, 2.0, 3.0])

    def test_constant_revenue(self):
        with pytest.raises(ComputationError):
            pearson_correlation([1.0, 2.0, 3.0], [5.0, 5.0, 5.0])

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="Length mismatch"):
            pearson_correlation([1.0, 2.0], [1.0])


class TestClassifySignificance:
    """Tests for classify_significance with default thresholds."""

    def test_strong(self):
        assert classify_significance(0.8, 10) == SignificanceLevel.STRONG
        assert classify_significance(-0.75, 30) == SignificanceLevel.STRONG

    def test_strong_correlation_small_sample_is_downgraded(self):
        assert classify_significance(0.95, 6) == SignificanceLevel.MODERATE
        assert classify_significance(0.95, 3) == SignificanceLevel.WEAK

    def test_moderate(self):
        assert classify_significance(0.5, 5) == SignificanceLevel.MODERATE

    def test_weak(self):
        assert classify_significance(0.1, 100) == SignificanceLevel.WEAK

    def test_monotonic_in_strength_and_samples(self):
        """A larger |r| or n never lowers the label."""
        order = [SignificanceLevel.WEAK, SignificanceLevel.MODERATE, SignificanceLevel.STRONG]
        for n in range(2, 20):
            previous = 0
            for step in range(0, 101):
                rank = order.index(classify_significance(step / 100, n))
                assert rank >= previous
                previous = rank
        for step in range(0, 101):
            previous = 0
            for n in range(2, 20):
                rank = order.index(classify_significance(step / 100, n))
                assert rank >= previous
                previous = rank


class TestCalculateCorrelations:
    """Tests for calculate_correlations."""

    def test_one_result_per_factor_in_order(self, sample_sales, sample_weather, sample_events):
        days = build_daily_aggregates(sample_sales, sample_weather, sample_events)

        results = calculate_correlations(days)

        assert [r.factor for r in results] == [f.name for f in CORRELATION_FACTORS]
        assert len(results) == 14

    def test_empty_days_still_report_every_factor(self):
        """No data yields insufficient_data for every factor, never NaN."""
        results = calculate_correlations([])

        assert len(results) == len(CORRELATION_FACTORS)
        for result in results:
            assert result.correlation == 0.0
            assert result.sample_size == 0
            assert result.significance == SignificanceLevel.INSUFFICIENT_DATA

    def test_values_are_finite_and_bounded(self, sample_sales, sample_weather, sample_events):
        days = build_daily_aggregates(sample_sales, sample_weather, sample_events)

        for result in calculate_correlations(days):
            assert math.isfinite(result.correlation)
            assert -1.0 <= result.correlation <= 1.0
            assert result.sample_size <= len(days)
            assert result.description

    def test_sample_factors(self, sample_sales, sample_weather, sample_events):
        """Known correlations on the three-day sample."""
        days = build_daily_aggregates(sample_sales, sample_weather, sample_events)
        results = {r.factor: r for r in calculate_correlations(days)}

        assert results["temperature"].correlation == pytest.approx(0.9934, abs=1e-4)
        # Three days never clear the minimum sample size for moderate
        assert results["temperature"].significance == SignificanceLevel.WEAK
        assert results["humidity"].correlation == pytest.approx(-0.9820, abs=1e-4)
        assert results["has_event"].correlation == pytest.approx(0.8660, abs=1e-4)
        assert results["rainy_day"].correlation == pytest.approx(-0.8660, abs=1e-4)
        assert results["is_weekend"].significance == SignificanceLevel.INSUFFICIENT_DATA
        assert results["weekday_sunday"].significance == SignificanceLevel.INSUFFICIENT_DATA

    def test_weather_factors_skip_days_without_weather(self, sample_sales, sample_weather):
        """Weather factors only use days with an observation."""
        days = build_daily_aggregates(sample_sales, sample_weather[:2], [])
        results = {r.factor: r for r in calculate_correlations(days)}

        assert results["temperature"].sample_size == 2
        assert results["is_weekend"].sample_size == 3

    def test_strong_over_many_days(self, make_day):
        """Revenue driven by temperature is labelled strong with enough days."""
        days = [
            make_day(date(2024, 3, 1) + timedelta(days=i), 1000.0 + 50 * i, temp_avg=10.0 + i)
            for i in range(12)
        ]

        result = evaluate_factor(CORRELATION_FACTORS[0], days)

        assert result.factor == "temperature"
        assert result.correlation == pytest.approx(1.0)
        assert result.significance == SignificanceLevel.STRONG
        assert result.sample_size == 12

    def test_custom_factor(self, make_day):
        """Factors are pluggable."""
        factor = FactorDefinition("revenue_echo", "revenue", lambda d: d.total_revenue)
        days = [make_day(date(2024, 3, i), float(i * 10)) for i in range(1, 4)]

        (result,) = calculate_correlations(days, factors=[factor])

        assert result.factor == "revenue_echo"
        assert result.correlation == pytest.approx(1.0)
