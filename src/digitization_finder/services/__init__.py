"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from digitization_finder.services import AnalyticsCacheService, ClientSearchService

    cache = AnalyticsCacheService.create(source=repository)
    search = ClientSearchService(catalog=catalog)
    ```
"""

from .analytics_cache import AnalyticsCacheService
from .matcher import ClientSearchService, categorize, fuzzy_search_clients, normalize_query, search
from .report_service import ReportService

__all__ = [
    "AnalyticsCacheService",
    "ClientSearchService",
    "ReportService",
    "categorize",
    "fuzzy_search_clients",
    "normalize_query",
    "search",
]
