"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (ClickHouse, Google Sheets, Redis, OpenAI)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .analytics_source import AnalyticsSource
from .catalog_source import CatalogSource
from .history_store import HistoryStore
from .report_generator import ReportGenerator

__all__ = [
    "AnalyticsSource",
    "CatalogSource",
    "HistoryStore",
    "ReportGenerator",
]
