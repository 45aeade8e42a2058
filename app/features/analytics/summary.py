"""Roll-up summary of a correlation analysis."""

from __future__ import annotations

from collections.abc import Sequence

from app.features.analytics.aggregation import DailyAggregate
from app.features.analytics.schemas import AnalysisSummary, CorrelationResult


def build_summary(
    days: Sequence[DailyAggregate],
    correlations: Sequence[CorrelationResult],
) -> AnalysisSummary:
    """Summarize analyzed days and pick the strongest correlations.

    Zero correlations (including insufficient_data results) are never picked.
    On ties the earlier factor wins.

    Args:
        days: Daily aggregates.
        correlations: Correlation results in factor order.

    Returns:
        Analysis summary.
    """
    total_days = len(days)
    average = sum(day.total_revenue for day in days) / total_days if total_days > 0 else 0.0

    strongest_positive: CorrelationResult | None = None
    strongest_negative: CorrelationResult | None = None
    for result in correlations:
        if result.correlation > 0 and (
            strongest_positive is None or result.correlation > strongest_positive.correlation
        ):
            strongest_positive = result
        if result.correlation < 0 and (
            strongest_negative is None or result.correlation < strongest_negative.correlation
        ):
            strongest_negative = result

    return AnalysisSummary(
        total_analyzed_days=total_days,
        average_daily_sales=average,
        strongest_positive=strongest_positive,
        strongest_negative=strongest_negative,
    )
