#!/usr/bin/env python
"""Check database connectivity and the raw analytics tables.

Usage:
    uv run python scripts/check_db.py
"""

import asyncio
import sys

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import get_settings

RAW_TABLES = ("sales", "ext_weather_daily", "ext_events")


async def check_database():
    """Verify database connection and that the raw tables are readable."""
    settings = get_settings()

    print("SalesPulse - Database Connectivity Check")
    print("=" * 42)
    print(f"Database URL: {settings.database_url.split('@')[1]}")  # Hide credentials
    print()

    engine = create_async_engine(settings.database_url)

    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            if result.scalar() != 1:
                print("[FAIL] Unexpected response to SELECT 1")
                return 1
            print("[OK] Basic connectivity")

            result = await conn.execute(text("SELECT version()"))
            version = result.scalar()
            print(f"[OK] PostgreSQL version: {version[:50]}...")

            missing = 0
            for table in RAW_TABLES:
                result = await conn.execute(
                    text("SELECT to_regclass(:name) IS NOT NULL"), {"name": table}
                )
                if not result.scalar():
                    print(f"[WARN] Table '{table}' not found")
                    missing += 1
                    continue
                result = await conn.execute(text(f"SELECT count(*) FROM {table}"))  # noqa: S608
                print(f"[OK] {table}: {result.scalar()} rows")

        print()
        if missing:
            print(f"Database reachable, but {missing} raw table(s) are missing.")
            print("The ETL pipeline is expected to create and load them.")
            return 1
        print("Database check completed successfully!")
        return 0

    except SQLAlchemyError as e:
        print(f"[FAIL] Connection failed: {e}")
        print()
        print("Troubleshooting:")
        print("  1. Ensure PostgreSQL is running")
        print("  2. Check DATABASE_URL in .env file")
        return 1

    finally:
        await engine.dispose()


def main():
    sys.exit(asyncio.run(check_database()))


if __name__ == "__main__":
    main()
