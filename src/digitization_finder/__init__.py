"""Digitization Finder - client search and cached warehouse analytics.

This package provides a layered architecture for the operations dashboard
backend:

Layers:
    - protocols: Interface contracts (AnalyticsSource, CatalogSource, ...)
    - repositories: ClickHouse, Google Sheets, OpenAI and Redis access
    - services: Business logic (fuzzy matching, analytics cache, reports)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from digitization_finder.repositories import ClickHouseAnalyticsRepository
    from digitization_finder.services import AnalyticsCacheService, search

    cache = AnalyticsCacheService.create(source=ClickHouseAnalyticsRepository.create())
    decision = search("Apogem Capital Partners", catalog)
    ```

For HTTP API:
    ```python
    from digitization_finder.api.app import app
    ```
"""

from digitization_finder.config import get_redis_client, settings
from digitization_finder.entities import (
    CacheEntry,
    CacheKey,
    ClientRecord,
    MatchCandidate,
    MatchType,
    SearchDecision,
    TimeRange,
)
from digitization_finder.errors import (
    AggregateFetchError,
    ConfigurationError,
    FinderError,
    ParseFailureError,
    ReportGenerationError,
    UpstreamChallengeError,
    UpstreamError,
    UpstreamFailureError,
)
from digitization_finder.models import ClientAggregate
from digitization_finder.protocols import AnalyticsSource, CatalogSource, HistoryStore, ReportGenerator
from digitization_finder.repositories import (
    ClickHouseAnalyticsRepository,
    GoogleSheetsCatalogRepository,
    OpenAIReportProvider,
    RedisHistoryRepository,
)
from digitization_finder.services import AnalyticsCacheService, ClientSearchService, ReportService, search

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "AnalyticsSource",
    "CatalogSource",
    "HistoryStore",
    "ReportGenerator",
    # Services (business logic)
    "AnalyticsCacheService",
    "ClientSearchService",
    "ReportService",
    "search",
    # Repositories (data access)
    "ClickHouseAnalyticsRepository",
    "GoogleSheetsCatalogRepository",
    "OpenAIReportProvider",
    "RedisHistoryRepository",
    # Entities and models
    "CacheEntry",
    "CacheKey",
    "ClientAggregate",
    "ClientRecord",
    "MatchCandidate",
    "MatchType",
    "SearchDecision",
    "TimeRange",
    # Errors
    "FinderError",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamChallengeError",
    "UpstreamFailureError",
    "ParseFailureError",
    "AggregateFetchError",
    "ReportGenerationError",
]
