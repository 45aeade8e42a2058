"""Optional result cache placed in front of the correlation service.

The engine itself never caches; callers that want caching wrap it with
CachedCorrelationService and inject any AnalysisCache implementation.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from app.core.logging import get_logger
from app.features.analytics.schemas import CorrelationAnalysisResponse, CorrelationFilters
from app.features.analytics.service import CorrelationService

logger = get_logger(__name__)


class AnalysisCache(Protocol):
    """Minimal key/value cache with per-entry TTL."""

    def get(self, key: str) -> CorrelationAnalysisResponse | None: ...

    def set(self, key: str, value: CorrelationAnalysisResponse, ttl_seconds: float) -> None: ...


class InMemoryAnalysisCache:
    """Process-local LRU cache with per-entry expiry.

    Not shared between worker processes.
    """

    def __init__(
        self,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Entries kept before the least recently used is evicted.
            clock: Monotonic time source (seconds).
        """
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, CorrelationAnalysisResponse]] = (
            OrderedDict()
        )

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> CorrelationAnalysisResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: CorrelationAnalysisResponse, ttl_seconds: float) -> None:
        self._entries[key] = (self._clock() + ttl_seconds, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)


def cache_key(filters: CorrelationFilters) -> str:
    """Stable cache key for a filter set."""
    return f"correlation:{filters.model_dump_json()}"


class CachedCorrelationService:
    """Serve repeated analyses from a cache.

    Only successful results are stored; validation and data access errors
    always propagate.
    """

    def __init__(
        self,
        service: CorrelationService,
        cache: AnalysisCache,
        ttl_seconds: float,
    ) -> None:
        self.service = service
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def analyze_correlations(
        self, filters: CorrelationFilters | Mapping[str, Any]
    ) -> CorrelationAnalysisResponse:
        """Return a cached analysis or compute and store a fresh one."""
        parsed = self.service.validate_filters(filters)
        key = cache_key(parsed)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("analytics.correlation_cache_hit", cache_key=key)
            return cached.model_copy(deep=True)

        result = await self.service.analyze_correlations(parsed)
        self.cache.set(key, result.model_copy(deep=True), self.ttl_seconds)
        return result
