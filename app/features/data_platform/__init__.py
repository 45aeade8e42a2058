"""Data platform feature: raw analytics source tables.

This module provides the read models the analytics engine consumes:
- ORM tables: SalesRecord, WeatherDaily, ExternalEvent
- Row schemas: SalesRow, WeatherRow, EventRow
"""

from app.features.data_platform.models import ExternalEvent, SalesRecord, WeatherDaily
from app.features.data_platform.schemas import EventRow, SalesRow, WeatherRow

__all__ = [
    "EventRow",
    "ExternalEvent",
    "SalesRecord",
    "SalesRow",
    "WeatherDaily",
    "WeatherRow",
]
