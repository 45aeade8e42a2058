"""Service layer for correlation analytics.

Runs the pipeline: fetch (concurrently) -> daily aggregation -> correlations,
heatmap, comparison series -> summary. The service holds no per-call state,
so one instance may serve concurrent analyses.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.core.exceptions import ValidationError
from app.core.logging import analysis_context, get_logger
from app.features.analytics.aggregation import build_daily_aggregates, build_revenue_index
from app.features.analytics.comparison import (
    EARLIEST_ANALYSIS_DATE,
    anchor_ranges,
    build_comparison_series,
)
from app.features.analytics.correlation import calculate_correlations
from app.features.analytics.heatmap import build_heatmap
from app.features.analytics.repository import (
    AbstractCorrelationRepository,
    DateRange,
    SalesFilters,
)
from app.features.analytics.schemas import (
    CorrelationAnalysisResponse,
    CorrelationFilters,
    PerformanceReport,
)
from app.features.analytics.summary import build_summary
from app.features.data_platform.schemas import EventRow, SalesRow, WeatherRow

logger = get_logger(__name__)

_SALES_ADAPTER = TypeAdapter(list[SalesRow])
_WEATHER_ADAPTER = TypeAdapter(list[WeatherRow])
_EVENTS_ADAPTER = TypeAdapter(list[EventRow])


@dataclass
class AnalysisRun:
    """One pipeline execution with the raw rows it consumed.

    Attributes:
        response: Analysis result returned to callers.
        sales: Sales rows for the analyzed range.
        history_sales: Sales rows for comparison anchors before the range.
        weather: Weather rows.
        events: Event rows.
    """

    response: CorrelationAnalysisResponse
    sales: list[SalesRow]
    history_sales: list[SalesRow]
    weather: list[WeatherRow]
    events: list[EventRow]

    @property
    def data_size_bytes(self) -> int:
        """Size of the retrieved rows serialized as JSON."""
        return (
            len(_SALES_ADAPTER.dump_json(self.sales))
            + len(_SALES_ADAPTER.dump_json(self.history_sales))
            + len(_WEATHER_ADAPTER.dump_json(self.weather))
            + len(_EVENTS_ADAPTER.dump_json(self.events))
        )


class CorrelationService:
    """Correlate daily sales with weather, events and calendar factors.

    The repository is the only collaborator; everything after the fetch is
    pure computation.
    """

    def __init__(self, repository: AbstractCorrelationRepository) -> None:
        """Initialize correlation service.

        Args:
            repository: Data access gateway for raw rows.
        """
        self.repository = repository
        self.settings = get_settings()

    def validate_filters(
        self, filters: CorrelationFilters | Mapping[str, Any]
    ) -> CorrelationFilters:
        """Validate analysis filters.

        Args:
            filters: Filters as a model or a plain mapping.

        Returns:
            Validated filters.

        Raises:
            ValidationError: If dates are missing or malformed, the range is
                inverted, it starts before the earliest analyzable date, or it
                exceeds the configured maximum span.
        """
        if isinstance(filters, CorrelationFilters):
            parsed = filters
        else:
            try:
                parsed = CorrelationFilters.model_validate(filters)
            except PydanticValidationError as e:
                errors = [
                    {
                        "field": ".".join(str(part) for part in error["loc"]),
                        "message": error["msg"],
                        "type": error["type"],
                    }
                    for error in e.errors()
                ]
                raise ValidationError(
                    "Invalid correlation filters",
                    details={"errors": errors},
                ) from e

        if parsed.end_date < parsed.start_date:
            raise ValidationError(
                "end_date must be >= start_date",
                details={
                    "start_date": str(parsed.start_date),
                    "end_date": str(parsed.end_date),
                },
            )

        if parsed.start_date < EARLIEST_ANALYSIS_DATE:
            raise ValidationError(
                f"start_date must be on or after {EARLIEST_ANALYSIS_DATE}",
                details={"start_date": str(parsed.start_date)},
            )

        span_days = (parsed.end_date - parsed.start_date).days + 1
        if span_days > self.settings.analytics_max_date_range_days:
            raise ValidationError(
                f"Date range of {span_days} days exceeds the maximum of "
                f"{self.settings.analytics_max_date_range_days} days",
                details={"span_days": span_days},
            )
        return parsed

    async def analyze_correlations(
        self, filters: CorrelationFilters | Mapping[str, Any]
    ) -> CorrelationAnalysisResponse:
        """Run a full correlation analysis.

        Args:
            filters: Date range (required) and optional store/department/category.

        Returns:
            Correlations, heatmap, comparison series and summary.

        Raises:
            ValidationError: If the filters are invalid (before any fetch).
            DataAccessError: If any fetch fails; no partial result is returned.
        """
        run = await self._run(filters)
        return run.response

    async def performance_test(
        self, filters: CorrelationFilters | Mapping[str, Any]
    ) -> PerformanceReport:
        """Time a full analysis and measure the data it retrieved.

        Args:
            filters: Same filters as analyze_correlations.

        Returns:
            Response time, retrieved data size and SLA verdict.
        """
        started = time.perf_counter()
        run = await self._run(filters)
        response_time_ms = (time.perf_counter() - started) * 1000

        report = PerformanceReport(
            response_time_ms=response_time_ms,
            data_size_bytes=run.data_size_bytes,
            within_sla=response_time_ms <= self.settings.analytics_correlation_sla_ms,
            total_analyzed_days=run.response.summary.total_analyzed_days,
        )

        logger.info(
            "analytics.performance_measured",
            response_time_ms=round(report.response_time_ms, 2),
            data_size_bytes=report.data_size_bytes,
            within_sla=report.within_sla,
        )
        return report

    async def _run(self, filters: CorrelationFilters | Mapping[str, Any]) -> AnalysisRun:
        """Validate, fetch and compute."""
        parsed = self.validate_filters(filters)
        date_range = DateRange(parsed.start_date, parsed.end_date)
        sales_filters = SalesFilters(
            store_id=parsed.store_id,
            department=parsed.department,
            category=parsed.category,
        )

        with analysis_context(
            start_date=str(parsed.start_date),
            end_date=str(parsed.end_date),
            store_id=parsed.store_id,
            department=parsed.department,
            category=parsed.category,
        ):
            started = time.perf_counter()
            sales, weather, events, history_sales = await self._fetch_all(
                date_range, sales_filters
            )
            fetched = time.perf_counter()

            days = build_daily_aggregates(sales, weather, events)
            correlations = calculate_correlations(days)
            heatmap_data = build_heatmap(days)
            comparison_data = build_comparison_series(days, build_revenue_index(history_sales))
            summary = build_summary(days, correlations)

            response = CorrelationAnalysisResponse(
                correlations=correlations,
                heatmap_data=heatmap_data,
                comparison_data=comparison_data,
                summary=summary,
                start_date=parsed.start_date,
                end_date=parsed.end_date,
                store_id=parsed.store_id,
                department=parsed.department,
                category=parsed.category,
            )

            logger.info(
                "analytics.correlation_completed",
                sales_rows=len(sales),
                history_sales_rows=len(history_sales),
                weather_rows=len(weather),
                event_rows=len(events),
                analyzed_days=summary.total_analyzed_days,
                fetch_ms=round((fetched - started) * 1000, 2),
                compute_ms=round((time.perf_counter() - fetched) * 1000, 2),
            )

        return AnalysisRun(
            response=response,
            sales=sales,
            history_sales=history_sales,
            weather=weather,
            events=events,
        )

    async def _fetch_all(
        self, date_range: DateRange, sales_filters: SalesFilters
    ) -> tuple[list[SalesRow], list[WeatherRow], list[EventRow], list[SalesRow]]:
        """Issue all fetches concurrently.

        If one fetch fails the others are cancelled and the error propagates
        unchanged.

        Returns:
            Tuple of (sales, weather, events, history_sales).
        """
        history_ranges = anchor_ranges(date_range.start, date_range.end)
        awaitables: list[Awaitable[list[Any]]] = [
            self.repository.fetch_sales(date_range, sales_filters),
            self.repository.fetch_weather(date_range),
            self.repository.fetch_events(date_range),
            *(self.repository.fetch_sales(r, sales_filters) for r in history_ranges),
        ]
        tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]

        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        sales, weather, events, *history = results
        history_sales = [row for rows in history for row in rows]
        return sales, weather, events, history_sales
