"""Pydantic schemas for raw data platform rows.

These are the fixed shapes the Data Access Gateway hands to the analytics
engine, independent of whichever store backs it.
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# SALES
# ============================================================================


class SalesRow(BaseModel):
    """One raw sales entry.

    Numeric fields that the source leaves empty are kept as None; the daily
    aggregator counts them as zero.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    date: datetime.date
    store_id: str = Field(..., min_length=1, max_length=50)
    department: str | None = Field(default=None, max_length=100)
    product_category: str | None = Field(default=None, max_length=100)
    revenue_ex_tax: float = Field(..., ge=0)
    footfall: int | None = Field(default=None, ge=0)
    transactions: int | None = Field(default=None, ge=0)
    discounts: float | None = Field(default=None, ge=0)
    tax: float = Field(default=0.0, ge=0)


# ============================================================================
# EXTERNAL TIME SERIES
# ============================================================================


class WeatherRow(BaseModel):
    """One daily weather observation."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    date: datetime.date
    location: str
    temp_avg: float | None = None
    temp_max: float | None = None
    temp_min: float | None = None
    humidity: float | None = Field(default=None, ge=0, le=100)
    precipitation: float | None = Field(default=None, ge=0)
    condition: str | None = None


class EventRow(BaseModel):
    """One local event."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    date: datetime.date
    title: str
    category: str | None = None
    location: str | None = None
    distance_km: float | None = Field(default=None, ge=0)
