"""Correlation engine: Pearson r between daily revenue and candidate factors.

Supported Factors (output order is fixed):
- temperature, humidity, precipitation: weather measurements
- rainy_day, sunny_day: 0/1 weather category indicators
- has_event: 0/1 local event indicator
- is_weekend: 0/1 Saturday/Sunday indicator
- weekday_monday .. weekday_sunday: 0/1 weekday indicators

CRITICAL: Every factor yields exactly one result. Degenerate inputs (fewer
than two pairs, constant factor, constant revenue) report correlation 0 with
significance 'insufficient_data'; NaN never leaves this module.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from app.core.config import get_settings
from app.features.analytics.aggregation import DailyAggregate
from app.features.analytics.schemas import CorrelationResult, SignificanceLevel, WeatherCategory

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class ComputationError(ArithmeticError):
    """Correlation is undefined for the given series.

    Internal only: evaluate_factor converts it into an insufficient_data result.
    """


@dataclass(frozen=True)
class FactorDefinition:
    """A candidate explanatory factor.

    Attributes:
        name: Stable machine name used in results.
        label: Human-readable name used in descriptions.
        extract: Returns the factor value for a day, or None if undefined.
    """

    name: str
    label: str
    extract: Callable[[DailyAggregate], float | None]


def _weather_value(field: str) -> Callable[[DailyAggregate], float | None]:
    def extract(day: DailyAggregate) -> float | None:
        if day.weather is None:
            return None
        value: float | None = getattr(day.weather, field)
        return value

    return extract


def _weather_is(category: WeatherCategory) -> Callable[[DailyAggregate], float | None]:
    def extract(day: DailyAggregate) -> float | None:
        if day.weather is None:
            return None
        return 1.0 if day.weather.category == category else 0.0

    return extract


def _weekday_is(weekday: int) -> Callable[[DailyAggregate], float | None]:
    return lambda day: 1.0 if day.day_of_week == weekday else 0.0


CORRELATION_FACTORS: tuple[FactorDefinition, ...] = (
    FactorDefinition("temperature", "average temperature", _weather_value("temp_avg")),
    FactorDefinition("humidity", "humidity", _weather_value("humidity")),
    FactorDefinition("precipitation", "precipitation", _weather_value("precipitation")),
    FactorDefinition("rainy_day", "rainy weather", _weather_is(WeatherCategory.RAINY)),
    FactorDefinition("sunny_day", "sunny weather", _weather_is(WeatherCategory.SUNNY)),
    FactorDefinition("has_event", "a nearby event", lambda d: 1.0 if d.has_event else 0.0),
    FactorDefinition("is_weekend", "weekend", lambda d: 1.0 if d.day_of_week >= 5 else 0.0),
    *(
        FactorDefinition(f"weekday_{name.lower()}", name, _weekday_is(index))
        for index, name in enumerate(WEEKDAY_NAMES)
    ),
)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient.

    Formula: sum(dx * dy) / sqrt(sum(dx^2) * sum(dy^2)), clipped to [-1, 1]
    to absorb floating-point overshoot.

    Args:
        x: Factor values.
        y: Revenue values, paired with x.

    Returns:
        Correlation coefficient in [-1, 1].

    Raises:
        ValueError: If the series have different lengths.
        ComputationError: If fewer than two pairs or either series is constant.
    """
    if len(x) != len(y):
        raise ValueError(f"Length mismatch: x={len(x)}, y={len(y)}")
    if len(x) < 2:
        raise ComputationError("At least two observations are required")

    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)

    # Exact equality: a mean-based check can drift for repeated floats
    if np.all(xs == xs[0]) or np.all(ys == ys[0]):
        raise ComputationError("Zero variance")

    dx = xs - xs.mean()
    dy = ys - ys.mean()
    denominator = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy)))
    if denominator == 0.0 or not math.isfinite(denominator):
        raise ComputationError("Zero variance")

    r = float(np.dot(dx, dy)) / denominator
    if not math.isfinite(r):
        raise ComputationError("Non-finite correlation")
    return float(np.clip(r, -1.0, 1.0))


def classify_significance(correlation: float, sample_size: int) -> SignificanceLevel:
    """Map (|r|, n) to a qualitative label.

    Monotonic: a larger |r| or a larger n never lowers the label.
    """
    settings = get_settings()
    strength = abs(correlation)
    if (
        strength >= settings.analytics_strong_correlation_threshold
        and sample_size >= settings.analytics_strong_min_samples
    ):
        return SignificanceLevel.STRONG
    if (
        strength >= settings.analytics_moderate_correlation_threshold
        and sample_size >= settings.analytics_moderate_min_samples
    ):
        return SignificanceLevel.MODERATE
    return SignificanceLevel.WEAK


def _direction(correlation: float) -> str:
    if correlation > 0:
        return "higher"
    if correlation < 0:
        return "lower"
    return "unchanged"


def evaluate_factor(factor: FactorDefinition, days: Sequence[DailyAggregate]) -> CorrelationResult:
    """Correlate one factor with daily revenue.

    Days where the factor is undefined (e.g. no weather recorded) are skipped.

    Args:
        factor: Factor to evaluate.
        days: Daily aggregates.

    Returns:
        Correlation result; never raises for degenerate data.
    """
    xs: list[float] = []
    ys: list[float] = []
    for day in days:
        value = factor.extract(day)
        if value is None:
            continue
        xs.append(float(value))
        ys.append(day.total_revenue)

    sample_size = len(xs)
    try:
        r = pearson_correlation(xs, ys)
    except ComputationError:
        return CorrelationResult(
            factor=factor.name,
            correlation=0.0,
            significance=SignificanceLevel.INSUFFICIENT_DATA,
            sample_size=sample_size,
            description=(
                f"Not enough variation to relate {factor.label} to daily sales "
                f"({sample_size} day(s) with data)."
            ),
        )

    significance = classify_significance(r, sample_size)
    return CorrelationResult(
        factor=factor.name,
        correlation=r,
        significance=significance,
        sample_size=sample_size,
        description=(
            f"Pearson r = {r:.3f} between {factor.label} and daily sales over "
            f"{sample_size} days ({significance.value}); sales tend to be "
            f"{_direction(r)} with {factor.label}."
        ),
    )


def calculate_correlations(
    days: Sequence[DailyAggregate],
    factors: Sequence[FactorDefinition] = CORRELATION_FACTORS,
) -> list[CorrelationResult]:
    """Evaluate every factor against daily revenue.

    Args:
        days: Daily aggregates (may be empty).
        factors: Factors to evaluate, in output order.

    Returns:
        One result per factor, in factor order.
    """
    return [evaluate_factor(factor, days) for factor in factors]
