"""Data platform ORM models for the raw analytics source tables.

These tables are populated by the ETL jobs; the analytics engine only reads them.

- SalesRecord: one row per (date, store, department, category) entry
- WeatherDaily: one row per (date, location)
- ExternalEvent: local events with distance from the store area
"""

import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    Float,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.shared.models import LoadAuditMixin

# ============================================================================
# FACT TABLES
# ============================================================================


class SalesRecord(LoadAuditMixin, Base):
    """Sales entry table.

    Several rows may exist for one date (different stores, departments or
    categories); the analytics engine sums them per day.

    Attributes:
        id: Surrogate primary key.
        date: Business date.
        store_id: Store identifier.
        department: Department name (optional).
        product_category: Product category name (optional).
        revenue_ex_tax: Revenue excluding tax.
        footfall: Visitor count (optional).
        transactions: Receipt count (optional).
        discounts: Discount total (optional).
        tax: Tax amount.
    """

    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[datetime.date] = mapped_column(Date, index=True)
    store_id: Mapped[str] = mapped_column(String(50), index=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    product_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    revenue_ex_tax: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    footfall: Mapped[int | None] = mapped_column(Integer, nullable=True)
    transactions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    discounts: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    __table_args__ = (
        # Composite index for the common query pattern: date range + store
        Index("ix_sales_date_store", "date", "store_id"),
        CheckConstraint("revenue_ex_tax >= 0", name="ck_sales_revenue_positive"),
        CheckConstraint("footfall IS NULL OR footfall >= 0", name="ck_sales_footfall_positive"),
        CheckConstraint(
            "transactions IS NULL OR transactions >= 0",
            name="ck_sales_transactions_positive",
        ),
        CheckConstraint(
            "discounts IS NULL OR discounts >= 0", name="ck_sales_discounts_positive"
        ),
        CheckConstraint("tax >= 0", name="ck_sales_tax_positive"),
        CheckConstraint("char_length(store_id) > 0", name="ck_sales_store_id_not_empty"),
    )


# ============================================================================
# EXTERNAL TIME SERIES
# ============================================================================


class WeatherDaily(LoadAuditMixin, Base):
    """Daily weather observations.

    CRITICAL: (date, location) is unique; the engine expects at most one row
    per date once the location filter is applied.

    Attributes:
        id: Primary key.
        date: Observation date.
        location: Observation location name.
        temp_avg: Average temperature (Celsius).
        temp_max: Maximum temperature (Celsius).
        temp_min: Minimum temperature (Celsius).
        humidity: Average relative humidity (percent).
        precipitation: Precipitation (mm).
        condition: Free-text weather condition (e.g. "Sunny", "雨").
    """

    __tablename__ = "ext_weather_daily"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[datetime.date] = mapped_column(Date, index=True)
    location: Mapped[str] = mapped_column(String(100))
    temp_avg: Mapped[float | None] = mapped_column(Float, nullable=True)
    temp_max: Mapped[float | None] = mapped_column(Float, nullable=True)
    temp_min: Mapped[float | None] = mapped_column(Float, nullable=True)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    precipitation: Mapped[float | None] = mapped_column(Float, nullable=True)
    condition: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("date", "location", name="uq_ext_weather_daily_date_location"),
        CheckConstraint(
            "humidity IS NULL OR (humidity >= 0 AND humidity <= 100)",
            name="ck_ext_weather_daily_humidity_range",
        ),
        CheckConstraint(
            "precipitation IS NULL OR precipitation >= 0",
            name="ck_ext_weather_daily_precipitation_positive",
        ),
    )


class ExternalEvent(LoadAuditMixin, Base):
    """Local events that may influence store traffic.

    Attributes:
        id: Primary key.
        date: Event date.
        title: Event title.
        category: Event category (e.g. "festival", "sports").
        location: Venue or area name.
        distance_km: Distance from the store area (optional).
    """

    __tablename__ = "ext_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[datetime.date] = mapped_column(Date, index=True)
    title: Mapped[str] = mapped_column(String(200))
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    distance_km: Mapped[float | None] = mapped_column(Float, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "distance_km IS NULL OR distance_km >= 0",
            name="ck_ext_events_distance_positive",
        ),
    )
