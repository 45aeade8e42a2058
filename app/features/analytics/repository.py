"""Data access gateway for correlation analytics.

Provides the abstract repository the engine depends on, an async SQLAlchemy
implementation against the raw tables, and a list-backed implementation for
demos and tests.

CRITICAL: Every fetch either returns a (possibly empty) list or raises
DataAccessError. No retries happen here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.exceptions import DataAccessError
from app.core.logging import get_logger
from app.features.data_platform.models import ExternalEvent, SalesRecord, WeatherDaily
from app.features.data_platform.schemas import EventRow, SalesRow, WeatherRow

logger = get_logger(__name__)

RowT = TypeVar("RowT", bound=BaseModel)


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range.

    Attributes:
        start: First date (inclusive).
        end: Last date (inclusive).
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must be <= end ({self.end})")

    def contains(self, day: date) -> bool:
        """Check whether a date falls inside the range."""
        return self.start <= day <= self.end


@dataclass(frozen=True)
class SalesFilters:
    """Optional equality predicates for sales rows.

    Attributes:
        store_id: Match SalesRow.store_id.
        department: Match SalesRow.department.
        category: Match SalesRow.product_category.
    """

    store_id: str | None = None
    department: str | None = None
    category: str | None = None

    def matches(self, row: SalesRow) -> bool:
        """Apply the predicates to a row in memory."""
        if self.store_id is not None and row.store_id != self.store_id:
            return False
        if self.department is not None and row.department != self.department:
            return False
        return self.category is None or row.product_category == self.category


class AbstractCorrelationRepository(ABC):
    """Read interface over raw sales, weather and event rows.

    Implementations must return rows ordered by date and translate any store
    failure into DataAccessError.
    """

    @abstractmethod
    async def fetch_sales(self, date_range: DateRange, filters: SalesFilters) -> list[SalesRow]:
        """Fetch sales rows within a date range.

        Args:
            date_range: Inclusive date range.
            filters: Optional dimensional filters.

        Returns:
            Matching sales rows (possibly empty).

        Raises:
            DataAccessError: If the store query fails.
        """

    @abstractmethod
    async def fetch_weather(self, date_range: DateRange) -> list[WeatherRow]:
        """Fetch weather rows within a date range.

        Raises:
            DataAccessError: If the store query fails.
        """

    @abstractmethod
    async def fetch_events(self, date_range: DateRange) -> list[EventRow]:
        """Fetch event rows within a date range.

        Raises:
            DataAccessError: If the store query fails.
        """


class SQLAlchemyCorrelationRepository(AbstractCorrelationRepository):
    """Repository backed by the raw PostgreSQL tables.

    Each fetch opens its own session so the three fetches of one analysis can
    run concurrently (an AsyncSession must not be shared between tasks).
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        weather_location: str | None = None,
        event_radius_km: float | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            session_maker: Factory for async sessions.
            weather_location: Only read weather for this location (optional).
            event_radius_km: Only read events within this distance (optional).
        """
        self._session_maker = session_maker
        self.weather_location = weather_location
        self.event_radius_km = event_radius_km

    @classmethod
    def from_settings(
        cls, session_maker: async_sessionmaker[AsyncSession]
    ) -> SQLAlchemyCorrelationRepository:
        """Build a repository scoped by the configured location and radius."""
        settings = get_settings()
        return cls(
            session_maker,
            weather_location=settings.analytics_weather_location,
            event_radius_km=settings.analytics_event_radius_km,
        )

    async def fetch_sales(self, date_range: DateRange, filters: SalesFilters) -> list[SalesRow]:
        """Fetch sales rows within a date range with optional filters."""
        stmt = (
            select(SalesRecord)
            .where((SalesRecord.date >= date_range.start) & (SalesRecord.date <= date_range.end))
            .order_by(SalesRecord.date, SalesRecord.id)
        )
        if filters.store_id is not None:
            stmt = stmt.where(SalesRecord.store_id == filters.store_id)
        if filters.department is not None:
            stmt = stmt.where(SalesRecord.department == filters.department)
        if filters.category is not None:
            stmt = stmt.where(SalesRecord.product_category == filters.category)

        return await self._execute("sales", stmt, date_range, SalesRow)

    async def fetch_weather(self, date_range: DateRange) -> list[WeatherRow]:
        """Fetch weather rows within a date range."""
        stmt = (
            select(WeatherDaily)
            .where((WeatherDaily.date >= date_range.start) & (WeatherDaily.date <= date_range.end))
            .order_by(WeatherDaily.date, WeatherDaily.id)
        )
        if self.weather_location is not None:
            stmt = stmt.where(WeatherDaily.location == self.weather_location)

        return await self._execute("weather", stmt, date_range, WeatherRow)

    async def fetch_events(self, date_range: DateRange) -> list[EventRow]:
        """Fetch event rows within a date range (and radius, if configured)."""
        stmt = (
            select(ExternalEvent)
            .where(
                (ExternalEvent.date >= date_range.start) & (ExternalEvent.date <= date_range.end)
            )
            .order_by(ExternalEvent.date, ExternalEvent.id)
        )
        if self.event_radius_km is not None:
            stmt = stmt.where(ExternalEvent.distance_km <= self.event_radius_km)

        return await self._execute("events", stmt, date_range, EventRow)

    async def _execute(
        self,
        source: str,
        stmt: Select[Any],
        date_range: DateRange,
        row_type: type[RowT],
    ) -> list[RowT]:
        """Run a select in a fresh session and map records to row schemas.

        Store errors and records that do not fit the row schema both surface
        as DataAccessError.
        """
        try:
            async with self._session_maker() as session:
                result = await session.execute(stmt)
                rows = [row_type.model_validate(record) for record in result.scalars().all()]
        except SQLAlchemyError as e:
            self._log_failure(source, date_range, e)
            raise DataAccessError(
                f"Failed to fetch {source} data: {e}",
                details={"source": source},
            ) from e
        except PydanticValidationError as e:
            self._log_failure(source, date_range, e)
            raise DataAccessError(
                f"Failed to map {source} rows: {e}",
                details={"source": source, "invalid_fields": e.error_count()},
            ) from e

        logger.debug(
            "analytics.data_fetched",
            source=source,
            start_date=str(date_range.start),
            end_date=str(date_range.end),
            row_count=len(rows),
        )
        return rows

    @staticmethod
    def _log_failure(source: str, date_range: DateRange, error: Exception) -> None:
        logger.error(
            "analytics.data_access_failed",
            source=source,
            start_date=str(date_range.start),
            end_date=str(date_range.end),
            error=str(error),
            error_type=type(error).__name__,
        )


class InMemoryCorrelationRepository(AbstractCorrelationRepository):
    """List-backed repository with the same filter semantics as the database one."""

    def __init__(
        self,
        sales: Iterable[SalesRow] = (),
        weather: Iterable[WeatherRow] = (),
        events: Iterable[EventRow] = (),
        event_radius_km: float | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            sales: Sales rows.
            weather: Weather rows.
            events: Event rows.
            event_radius_km: Only return events within this distance (optional).
        """
        self._sales = sorted(sales, key=lambda r: r.date)
        self._weather = sorted(weather, key=lambda r: r.date)
        self._events = sorted(events, key=lambda r: r.date)
        self.event_radius_km = event_radius_km

    async def fetch_sales(self, date_range: DateRange, filters: SalesFilters) -> list[SalesRow]:
        """Fetch sales rows within a date range with optional filters."""
        return [r for r in self._sales if date_range.contains(r.date) and filters.matches(r)]

    async def fetch_weather(self, date_range: DateRange) -> list[WeatherRow]:
        """Fetch weather rows within a date range."""
        return [r for r in self._weather if date_range.contains(r.date)]

    async def fetch_events(self, date_range: DateRange) -> list[EventRow]:
        """Fetch event rows within a date range (and radius, if configured)."""
        return [
            r
            for r in self._events
            if date_range.contains(r.date)
            and (
                self.event_radius_km is None
                or (r.distance_km is not None and r.distance_km <= self.event_radius_km)
            )
        ]
