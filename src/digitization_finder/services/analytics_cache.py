"""Analytics result cache.

Memoizes the four-part client aggregate per (client, time range) for 24
hours in process memory.

Known property: the lookup, fetch and store steps are not atomic across
awaits, so two concurrent misses for the same key both fetch and the last
one to finish wins. Both fetches compute the same answer.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from digitization_finder.config import settings
from digitization_finder.entities import CacheEntry, CacheKey, TimeRange
from digitization_finder.errors import AggregateFetchError, ParseFailureError
from digitization_finder.models import ROW_MODELS, ClientAggregate
from digitization_finder.protocols import AnalyticsSource
from digitization_finder.queries import SUB_QUERIES

logger = logging.getLogger(__name__)


class AnalyticsCacheService:
    """Fetches client aggregates, serving repeats from an in-memory cache.

    The service depends on the AnalyticsSource PROTOCOL; the clock is
    injectable so expiry can be tested without waiting.

    Example:
        ```python
        from digitization_finder.repositories import ClickHouseAnalyticsRepository
        from digitization_finder.services import AnalyticsCacheService

        cache = AnalyticsCacheService.create(source=ClickHouseAnalyticsRepository.create())
        aggregate = await cache.get_aggregate("Apogem", TimeRange.CURRENT_YEAR)
        ```
    """

    def __init__(
        self,
        source: AnalyticsSource,
        ttl: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache service.

        Args:
            source: Analytics query backend (required).
            ttl: Entry lifetime in seconds. Defaults to settings (24 hours).
            clock: Source of Unix timestamps.
        """
        self._source = source
        self._ttl = settings.analytics_cache_ttl if ttl is None else ttl
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}

    @classmethod
    def create(
        cls,
        source: AnalyticsSource,
        ttl: float | None = None,
    ) -> "AnalyticsCacheService":
        """Factory method to create AnalyticsCacheService with defaults."""
        return cls(source=source, ttl=ttl)

    def _lookup(self, key: CacheKey) -> ClientAggregate | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock(), self._ttl):
            del self._entries[key]
            logger.info("[Cache] EXPIRED for key: %s", key)
            return None

        logger.info("[Cache] HIT for key: %s", key)
        return entry.payload

    def _store(self, key: CacheKey, payload: ClientAggregate) -> None:
        self._entries[key] = CacheEntry(key=key, payload=payload, stored_at=self._clock())
        logger.info("[Cache] SET for key: %s", key)

    async def _run_sub_query(self, name: str, client: str, time_range: TimeRange) -> list[BaseModel]:
        """Run one sub-query and validate its rows.

        Raises:
            AggregateFetchError: Wrapping the source's error, or a
                ParseFailureError when a row does not fit its model
        """
        query = SUB_QUERIES[name](client, time_range)
        try:
            rows = await self._source.execute(query)
            return [ROW_MODELS[name].model_validate(row) for row in rows]
        except ValidationError as e:
            cause = ParseFailureError(f"Malformed {name} row: {e}")
            raise AggregateFetchError(client, name, cause) from e
        except Exception as e:
            raise AggregateFetchError(client, name, e) from e

    async def fetch_aggregate(self, client: str, time_range: TimeRange) -> ClientAggregate:
        """Run the four sub-queries concurrently, bypassing the cache.

        Raises:
            AggregateFetchError: If any sub-query fails or returns malformed rows
        """
        basic_info, project_counts, performance_metrics, recent_activities = await asyncio.gather(
            *(self._run_sub_query(name, client, time_range) for name in SUB_QUERIES)
        )
        return ClientAggregate(
            basic_info=basic_info,
            project_counts=project_counts[0] if project_counts else None,
            performance_metrics=performance_metrics,
            recent_activities=recent_activities,
        )

    async def get_aggregate(
        self,
        client: str,
        time_range: TimeRange = TimeRange.CURRENT_YEAR,
        use_cache: bool = True,
    ) -> ClientAggregate:
        """Return the client's aggregate, from cache when fresh.

        Business logic:
        1. Look up (client, time range); a fresh entry is returned without I/O
        2. Expired entries are dropped on discovery
        3. On a miss, fetch all four sub-queries concurrently
        4. Store the combined result and return it

        Args:
            client: Client folder name as known to the warehouse
            time_range: Date window for the sub-queries
            use_cache: Skip the lookup (the fresh result is still stored)

        Returns:
            The combined aggregate

        Raises:
            AggregateFetchError: If any sub-query fails; nothing is cached
        """
        key = CacheKey(client=client, time_range=TimeRange(time_range))

        if use_cache:
            cached = self._lookup(key)
            if cached is not None:
                return cached

        logger.info("[Cache] MISS for key: %s", key)
        try:
            aggregate = await self.fetch_aggregate(client, key.time_range)
        except AggregateFetchError:
            logger.exception("Error fetching client context data for %s", client)
            raise

        self._store(key, aggregate)
        return aggregate

    def invalidate(self, client: str) -> int:
        """Drop every cached time range for one client.

        Returns:
            Number of entries removed
        """
        keys = [key for key in self._entries if key.client == client]
        for key in keys:
            del self._entries[key]
        logger.info("[Cache] CLEARED %d entries for client: %s", len(keys), client)
        return len(keys)

    def invalidate_all(self) -> int:
        """Clear the whole cache.

        Returns:
            Number of entries removed
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("[Cache] CLEARED ALL (%d entries)", count)
        return count

    def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with entry count and ttl
        """
        return {
            "total_entries": len(self._entries),
            "ttl_seconds": self._ttl,
        }

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def source(self) -> AnalyticsSource:
        """Get the underlying analytics source (for testing)."""
        return self._source
