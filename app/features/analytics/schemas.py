"""Pydantic schemas for correlation analytics endpoints.

These schemas define the analysis filters and the four result blocks
(correlations, heatmap, comparison series, summary) returned to dashboards.
"""

import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class SignificanceLevel(str, Enum):
    """Qualitative confidence label for a correlation.

    Derived from sample size and |r|; this is not a statistical p-value.
    """

    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    INSUFFICIENT_DATA = "insufficient_data"


class WeatherCategory(str, Enum):
    """Coarse weather buckets used for heatmaps and comparison points."""

    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    OTHER = "other"


# =============================================================================
# Request Schemas
# =============================================================================


class CorrelationFilters(BaseModel):
    """Filters for one correlation analysis.

    Date ordering and span limits are checked by the service so that they
    surface as a ValidationError before any data is fetched.
    """

    model_config = ConfigDict(frozen=True)

    start_date: datetime.date = Field(
        ...,
        description="Start of analysis period (inclusive). Format: YYYY-MM-DD.",
    )
    end_date: datetime.date = Field(
        ...,
        description="End of analysis period (inclusive). Must be >= start_date.",
    )
    store_id: str | None = Field(
        None,
        min_length=1,
        max_length=50,
        description="Restrict sales to one store. Null means all stores.",
    )
    department: str | None = Field(
        None,
        min_length=1,
        max_length=100,
        description="Restrict sales to one department. Null means all departments.",
    )
    category: str | None = Field(
        None,
        min_length=1,
        max_length=100,
        description="Restrict sales to one product category. Null means all categories.",
    )


# =============================================================================
# Result Schemas
# =============================================================================


class CorrelationResult(BaseModel):
    """Pearson correlation between daily revenue and one factor."""

    factor: str = Field(..., description="Factor name (e.g. 'temperature', 'has_event').")
    correlation: float = Field(
        ...,
        ge=-1.0,
        le=1.0,
        description="Pearson r. Reported as 0 when the factor cannot be evaluated.",
    )
    significance: SignificanceLevel = Field(
        ...,
        description="Qualitative label from sample size and |r|. "
        "'insufficient_data' means the factor could not be evaluated.",
    )
    sample_size: int = Field(
        ...,
        ge=0,
        description="Number of (factor, revenue) day pairs used.",
    )
    description: str = Field(..., description="Human-readable summary of the result.")


class HeatmapCell(BaseModel):
    """One cell of the weekday x weather heatmap."""

    x: str = Field(..., description="Weekday short name (Mon..Sun).")
    y: WeatherCategory = Field(..., description="Weather category.")
    value: float = Field(
        ...,
        ge=0,
        description="Average daily revenue over the days in this cell.",
    )
    sample_size: int = Field(..., ge=1, description="Number of days in this cell.")
    relative_index: float = Field(
        ...,
        ge=0,
        description="Cell average divided by the overall average daily revenue (1.0 = typical).",
    )


class ComparisonPoint(BaseModel):
    """Week-over-week and year-over-year anchors for one analyzed day."""

    date: datetime.date = Field(..., description="Analyzed date.")
    current: float = Field(..., ge=0, description="Total revenue on this date.")
    previous_day: float = Field(
        ...,
        ge=0,
        description="Revenue on the comparison day: the same weekday last week "
        "(7 days earlier). 0 if no data.",
    )
    previous_year: float = Field(
        ...,
        ge=0,
        description="Revenue on the same calendar date one year earlier. 0 if no data.",
    )
    day_of_week: int = Field(..., ge=0, le=6, description="0=Monday, 6=Sunday.")
    weather_condition: WeatherCategory | None = Field(
        None,
        description="Weather category for the date. Null when no weather was recorded.",
    )
    has_event: bool = Field(False, description="True if a local event took place.")


class AnalysisSummary(BaseModel):
    """Roll-up of one analysis."""

    total_analyzed_days: int = Field(
        ...,
        ge=0,
        description="Distinct dates with sales data (not the calendar span).",
    )
    average_daily_sales: float = Field(
        ...,
        ge=0,
        description="Mean daily revenue over analyzed days. 0 when no days.",
    )
    strongest_positive: CorrelationResult | None = Field(
        None,
        description="Factor with the highest correlation above 0 (if any).",
    )
    strongest_negative: CorrelationResult | None = Field(
        None,
        description="Factor with the lowest correlation below 0 (if any).",
    )


class CorrelationAnalysisResponse(BaseModel):
    """Full correlation analysis for a filter set."""

    correlations: list[CorrelationResult] = Field(
        ...,
        description="One entry per supported factor, in a stable order.",
    )
    heatmap_data: list[HeatmapCell] = Field(
        ...,
        description="Observed weekday x weather cells only.",
    )
    comparison_data: list[ComparisonPoint] = Field(
        ...,
        description="One point per analyzed day, ordered by date.",
    )
    summary: AnalysisSummary
    start_date: datetime.date = Field(..., description="Start of the analysis period.")
    end_date: datetime.date = Field(..., description="End of the analysis period.")
    store_id: str | None = Field(None, description="Store filter applied (if any).")
    department: str | None = Field(None, description="Department filter applied (if any).")
    category: str | None = Field(None, description="Category filter applied (if any).")


class AnalysisMeta(BaseModel):
    """Timing metadata attached by the HTTP layer."""

    processing_time_ms: float = Field(..., ge=0, description="Server-side processing time.")
    within_sla: bool = Field(..., description="True if processing met the response-time target.")
    generated_at: datetime.datetime = Field(..., description="UTC timestamp of the response.")


class CorrelationAnalysisEnvelope(BaseModel):
    """HTTP response wrapper for a correlation analysis."""

    data: CorrelationAnalysisResponse
    meta: AnalysisMeta


class PerformanceReport(BaseModel):
    """Instrumentation for one full analysis run."""

    response_time_ms: float = Field(..., ge=0, description="Wall-clock time of the analysis.")
    data_size_bytes: int = Field(
        ...,
        ge=0,
        description="Serialized size of the sales, weather and event rows retrieved.",
    )
    within_sla: bool = Field(..., description="True if response_time_ms met the target.")
    total_analyzed_days: int = Field(..., ge=0, description="Days analyzed in the run.")


# =============================================================================
# Configuration Schemas
# =============================================================================


class FactorInfo(BaseModel):
    """Description of one supported correlation factor."""

    name: str
    label: str


class SignificanceThresholds(BaseModel):
    """Tier boundaries for significance labels."""

    strong_correlation: float = Field(..., ge=0, le=1)
    moderate_correlation: float = Field(..., ge=0, le=1)
    strong_min_samples: int = Field(..., ge=2)
    moderate_min_samples: int = Field(..., ge=2)


class CorrelationConfigResponse(BaseModel):
    """Capabilities and limits of the correlation endpoint."""

    factors: list[FactorInfo] = Field(..., description="Supported factors in output order.")
    sla_ms: int = Field(..., description="Response-time target (p95) in milliseconds.")
    max_date_range_days: int = Field(..., description="Longest accepted analysis period.")
    significance: SignificanceThresholds
    cache_enabled: bool
    cache_ttl_seconds: int
