"""HTTP handlers for client analytics and the analytics cache."""

import logging
from datetime import datetime, timezone

from digitization_finder.dto import CacheInvalidateResponse, CacheStatsResponse, ClientContextResponse
from digitization_finder.entities import TimeRange
from digitization_finder.services import AnalyticsCacheService

from .errors import http_error

logger = logging.getLogger(__name__)


class ClientContextHandler:
    """HTTP handlers for client aggregates.

    Delegates to AnalyticsCacheService and handles HTTP concerns:
    - Converting aggregates to DTOs
    - Mapping upstream failures to status codes
    """

    def __init__(self, cache_service: AnalyticsCacheService) -> None:
        """Initialize the client context handler.

        Args:
            cache_service: The analytics cache service (required).
        """
        self._cache = cache_service

    async def get_context(self, folder_name: str, time_range: TimeRange) -> ClientContextResponse:
        """Handle GET /api/client-context requests.

        Raises:
            HTTPException: If any analytic sub-query failed
        """
        logger.info("Fetching client context for %s with time range %s", folder_name, time_range.value)
        try:
            data = await self._cache.get_aggregate(folder_name, time_range)
        except Exception as e:
            raise http_error(e, "fetch client context") from e

        return ClientContextResponse(
            data=data,
            time_range=time_range.value,
            cached_at=datetime.now(timezone.utc).isoformat(),
        )

    async def invalidate(self, folder_name: str | None) -> CacheInvalidateResponse:
        """Handle DELETE /api/client-context/cache requests.

        Clears one client's entries, or the whole cache without a name.
        """
        if folder_name:
            count = self._cache.invalidate(folder_name)
            message = f"Cache cleared for client: {folder_name}"
        else:
            count = self._cache.invalidate_all()
            message = "Cache cleared successfully"

        return CacheInvalidateResponse(success=True, deleted_count=count, message=message)

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /api/client-context/cache requests."""
        return CacheStatsResponse(**self._cache.stats())
