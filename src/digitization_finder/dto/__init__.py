"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import ClientNoteRequest, GenerateReportRequest, SearchClientRequest, SearchHistoryRequest
from .responses import (
    CacheInvalidateResponse,
    CacheStatsResponse,
    ClientContextResponse,
    ClientMatchItem,
    GenerateReportResponse,
    HealthCheckResponse,
    HistoryResponse,
    ReportMetadata,
    SearchClientResponse,
)

__all__ = [
    "SearchClientRequest",
    "GenerateReportRequest",
    "SearchHistoryRequest",
    "ClientNoteRequest",
    "ClientMatchItem",
    "SearchClientResponse",
    "ClientContextResponse",
    "CacheInvalidateResponse",
    "CacheStatsResponse",
    "GenerateReportResponse",
    "ReportMetadata",
    "HistoryResponse",
    "HealthCheckResponse",
]
