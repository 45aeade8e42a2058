"""Test fixtures for analytics module."""

import random
from collections.abc import Callable
from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from app.features.analytics.aggregation import DailyAggregate, WeatherSnapshot, classify_weather
from app.features.analytics.repository import InMemoryCorrelationRepository
from app.features.analytics.routes import get_correlation_repository
from app.features.analytics.service import CorrelationService
from app.features.data_platform.schemas import EventRow, SalesRow, WeatherRow
from app.main import app

# 2024-01-01 is a Monday
SAMPLE_START = date(2024, 1, 1)


@pytest.fixture
def sample_sales() -> list[SalesRow]:
    """Three days of sales for one store: 100k, 120k, 80k."""
    return [
        SalesRow(
            date=date(2024, 1, 1),
            store_id="store1",
            department="electronics",
            product_category="smartphones",
            revenue_ex_tax=100000.0,
            footfall=50,
            transactions=25,
            discounts=5000.0,
            tax=10000.0,
        ),
        SalesRow(
            date=date(2024, 1, 2),
            store_id="store1",
            department="electronics",
            product_category="smartphones",
            revenue_ex_tax=120000.0,
            footfall=60,
            transactions=30,
            discounts=6000.0,
            tax=12000.0,
        ),
        SalesRow(
            date=date(2024, 1, 3),
            store_id="store1",
            department="electronics",
            product_category="smartphones",
            revenue_ex_tax=80000.0,
            footfall=40,
            transactions=20,
            discounts=4000.0,
            tax=8000.0,
        ),
    ]


@pytest.fixture
def sample_weather() -> list[WeatherRow]:
    """Sunny, cloudy and rainy weather matching sample_sales."""
    return [
        WeatherRow(
            date=date(2024, 1, 1),
            location="tokyo",
            temp_avg=5.0,
            humidity=60.0,
            precipitation=0.0,
            condition="晴れ",
        ),
        WeatherRow(
            date=date(2024, 1, 2),
            location="tokyo",
            temp_avg=8.0,
            humidity=50.0,
            precipitation=0.0,
            condition="曇り",
        ),
        WeatherRow(
            date=date(2024, 1, 3),
            location="tokyo",
            temp_avg=3.0,
            humidity=80.0,
            precipitation=12.0,
            condition="雨",
        ),
    ]


@pytest.fixture
def sample_events() -> list[EventRow]:
    """One nearby event on 2024-01-02."""
    return [
        EventRow(
            date=date(2024, 1, 2),
            title="New Year Market",
            category="festival",
            location="tokyo",
            distance_km=1.2,
        )
    ]


@pytest.fixture
def repository(
    sample_sales: list[SalesRow],
    sample_weather: list[WeatherRow],
    sample_events: list[EventRow],
) -> InMemoryCorrelationRepository:
    """In-memory repository seeded with the sample rows."""
    return InMemoryCorrelationRepository(sample_sales, sample_weather, sample_events)


@pytest.fixture
def service(repository: InMemoryCorrelationRepository) -> CorrelationService:
    """Correlation service over the sample repository."""
    return CorrelationService(repository)


@pytest.fixture
def make_day() -> Callable[..., DailyAggregate]:
    """Factory for DailyAggregate instances."""

    def _make_day(
        day: date,
        revenue: float,
        condition: str | None = None,
        temp_avg: float | None = None,
        events: int = 0,
    ) -> DailyAggregate:
        weather = None
        if condition is not None or temp_avg is not None:
            weather = WeatherSnapshot(
                temp_avg=temp_avg,
                humidity=None,
                precipitation=None,
                condition=condition,
                category=classify_weather(condition),
            )
        return DailyAggregate(
            date=day,
            day_of_week=day.weekday(),
            total_revenue=revenue,
            sales_row_count=1,
            weather=weather,
            event_count=events,
        )

    return _make_day


@pytest.fixture
def synthetic_repository() -> InMemoryCorrelationRepository:
    """1,000 sales rows (200 days x 5 stores) with daily weather and weekly events.

    Seeded so every run sees the same data.
    """
    rng = random.Random(42)
    conditions = ["晴れ", "曇り", "雨", "晴れ時々曇り"]
    stores = [f"store{i}" for i in range(1, 6)]

    sales: list[SalesRow] = []
    weather: list[WeatherRow] = []
    events: list[EventRow] = []
    for offset in range(200):
        day = SAMPLE_START + timedelta(days=offset)
        temp = rng.uniform(-2.0, 32.0)
        condition = rng.choice(conditions)
        weather.append(
            WeatherRow(
                date=day,
                location="tokyo",
                temp_avg=round(temp, 1),
                humidity=round(rng.uniform(30.0, 95.0), 1),
                precipitation=round(rng.uniform(0.0, 30.0), 1) if "雨" in condition else 0.0,
                condition=condition,
            )
        )
        if offset % 7 == 5:
            events.append(EventRow(date=day, title=f"Weekend fair {offset}", distance_km=2.0))
        for store in stores:
            revenue = 50000 + temp * 800 + rng.uniform(-5000.0, 5000.0)
            sales.append(
                SalesRow(
                    date=day,
                    store_id=store,
                    department="grocery",
                    product_category="fresh",
                    revenue_ex_tax=round(max(revenue, 0.0), 2),
                    footfall=rng.randint(100, 400),
                    transactions=rng.randint(50, 200),
                    tax=round(max(revenue, 0.0) * 0.1, 2),
                )
            )
    return InMemoryCorrelationRepository(sales, weather, events)


@pytest.fixture
async def analytics_client(repository: InMemoryCorrelationRepository):
    """HTTP client with the analytics repository replaced by the sample one."""
    app.dependency_overrides[get_correlation_repository] = lambda: repository
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_correlation_repository, None)
