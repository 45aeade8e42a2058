"""API routes for correlation analytics.

Authentication, RBAC and audit logging are applied in front of these
endpoints by the gateway; the handlers only run the analysis.
"""

import time
from datetime import UTC, datetime
from functools import lru_cache

from fastapi import APIRouter, Body, Depends

from app.core.config import get_settings
from app.core.database import get_session_maker
from app.core.logging import get_logger
from app.features.analytics.cache import CachedCorrelationService, InMemoryAnalysisCache
from app.features.analytics.correlation import CORRELATION_FACTORS
from app.features.analytics.repository import (
    AbstractCorrelationRepository,
    SQLAlchemyCorrelationRepository,
)
from app.features.analytics.schemas import (
    AnalysisMeta,
    CorrelationAnalysisEnvelope,
    CorrelationConfigResponse,
    CorrelationFilters,
    FactorInfo,
    PerformanceReport,
    SignificanceThresholds,
)
from app.features.analytics.service import CorrelationService

logger = get_logger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


# =============================================================================
# Dependencies
# =============================================================================


def get_correlation_repository() -> AbstractCorrelationRepository:
    """Repository over the raw sales, weather and event tables."""
    return SQLAlchemyCorrelationRepository.from_settings(get_session_maker())


@lru_cache
def get_analysis_cache() -> InMemoryAnalysisCache:
    """Process-wide analysis cache (used only when caching is enabled)."""
    return InMemoryAnalysisCache(max_entries=get_settings().analytics_cache_max_entries)


# =============================================================================
# Correlation Endpoints
# =============================================================================


@router.post(
    "/correlation",
    response_model=CorrelationAnalysisEnvelope,
    summary="Run correlation analysis",
    description="""
Correlate daily sales with weather, local events and calendar factors.

**Result blocks**:
- `correlations`: Pearson r per factor (always one entry per supported factor)
- `heatmap_data`: average daily revenue per weekday x weather cell (observed cells only)
- `comparison_data`: per day, revenue vs. same weekday last week and same date last year
- `summary`: analyzed days, average daily sales, strongest positive/negative factor

**Date Range**:
- Both start_date and end_date are inclusive; end_date must be >= start_date
- Maximum range is configured by ANALYTICS_MAX_DATE_RANGE_DAYS

**Example**:
`POST /analytics/correlation {"start_date": "2024-01-01", "end_date": "2024-03-31", "store_id": "store1"}`
""",
)
async def analyze_correlation(
    filters: CorrelationFilters = Body(...),
    repository: AbstractCorrelationRepository = Depends(get_correlation_repository),
    cache: InMemoryAnalysisCache = Depends(get_analysis_cache),
) -> CorrelationAnalysisEnvelope:
    """Run a correlation analysis and attach timing metadata.

    Args:
        filters: Analysis filters.
        repository: Data access gateway.
        cache: Analysis cache.

    Returns:
        Analysis result with processing time and SLA verdict.
    """
    settings = get_settings()
    started = time.perf_counter()

    service = CorrelationService(repository)
    if settings.analytics_cache_enabled:
        result = await CachedCorrelationService(
            service, cache, ttl_seconds=settings.analytics_cache_ttl_seconds
        ).analyze_correlations(filters)
    else:
        result = await service.analyze_correlations(filters)

    processing_time_ms = (time.perf_counter() - started) * 1000
    within_sla = processing_time_ms <= settings.analytics_correlation_sla_ms
    if not within_sla:
        logger.warning(
            "analytics.correlation_sla_exceeded",
            processing_time_ms=round(processing_time_ms, 2),
            sla_ms=settings.analytics_correlation_sla_ms,
            start_date=str(filters.start_date),
            end_date=str(filters.end_date),
            data_points=len(result.comparison_data),
        )

    return CorrelationAnalysisEnvelope(
        data=result,
        meta=AnalysisMeta(
            processing_time_ms=processing_time_ms,
            within_sla=within_sla,
            generated_at=datetime.now(UTC),
        ),
    )


@router.post(
    "/correlation/performance",
    response_model=PerformanceReport,
    summary="Measure correlation analysis performance",
    description="""
Run a full analysis (uncached) and report wall-clock time and the serialized
size of the rows retrieved. Used by operational checks against the SLA.
""",
)
async def correlation_performance(
    filters: CorrelationFilters = Body(...),
    repository: AbstractCorrelationRepository = Depends(get_correlation_repository),
) -> PerformanceReport:
    """Measure one analysis run.

    Args:
        filters: Analysis filters.
        repository: Data access gateway.

    Returns:
        Performance report.
    """
    return await CorrelationService(repository).performance_test(filters)


@router.get(
    "/correlation/config",
    response_model=CorrelationConfigResponse,
    summary="Describe correlation analysis capabilities",
)
async def correlation_config() -> CorrelationConfigResponse:
    """Supported factors, limits and significance tiers."""
    settings = get_settings()
    return CorrelationConfigResponse(
        factors=[FactorInfo(name=f.name, label=f.label) for f in CORRELATION_FACTORS],
        sla_ms=settings.analytics_correlation_sla_ms,
        max_date_range_days=settings.analytics_max_date_range_days,
        significance=SignificanceThresholds(
            strong_correlation=settings.analytics_strong_correlation_threshold,
            moderate_correlation=settings.analytics_moderate_correlation_threshold,
            strong_min_samples=settings.analytics_strong_min_samples,
            moderate_min_samples=settings.analytics_moderate_min_samples,
        ),
        cache_enabled=settings.analytics_cache_enabled,
        cache_ttl_seconds=settings.analytics_cache_ttl_seconds,
    )
