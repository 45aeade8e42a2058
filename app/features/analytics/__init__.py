"""Analytics module for sales correlation and comparative analysis.

Joins daily sales with weather and local events to produce factor
correlations, a weekday x weather heatmap, week/year comparisons and a summary.
"""

from app.features.analytics.repository import (
    AbstractCorrelationRepository,
    DateRange,
    InMemoryCorrelationRepository,
    SalesFilters,
    SQLAlchemyCorrelationRepository,
)
from app.features.analytics.routes import router
from app.features.analytics.schemas import (
    CorrelationAnalysisResponse,
    CorrelationFilters,
    CorrelationResult,
    PerformanceReport,
    SignificanceLevel,
)
from app.features.analytics.service import CorrelationService

__all__ = [
    "AbstractCorrelationRepository",
    "CorrelationAnalysisResponse",
    "CorrelationFilters",
    "CorrelationResult",
    "CorrelationService",
    "DateRange",
    "InMemoryCorrelationRepository",
    "PerformanceReport",
    "SQLAlchemyCorrelationRepository",
    "SalesFilters",
    "SignificanceLevel",
    "router",
]
