"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .client_handler import ClientContextHandler
from .history_handler import HistoryHandler
from .report_handler import ReportHandler
from .search_handler import SearchHandler

__all__ = [
    "ClientContextHandler",
    "HistoryHandler",
    "ReportHandler",
    "SearchHandler",
]
