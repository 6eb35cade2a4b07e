"""Repository layer for data access.

This layer wraps external services (ClickHouse, Google Sheets, OpenAI,
Redis) behind protocol-based interfaces. This enables:
- Easy swapping of implementations
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from digitization_finder.protocols import AnalyticsSource, CatalogSource, HistoryStore, ReportGenerator

from .clickhouse_repository import ClickHouseAnalyticsRepository
from .openai_report_provider import OpenAIReportProvider
from .redis_history_repository import RedisHistoryRepository
from .sheets_repository import GoogleSheetsCatalogRepository

__all__ = [
    "AnalyticsSource",
    "CatalogSource",
    "HistoryStore",
    "ReportGenerator",
    "ClickHouseAnalyticsRepository",
    "GoogleSheetsCatalogRepository",
    "OpenAIReportProvider",
    "RedisHistoryRepository",
]
