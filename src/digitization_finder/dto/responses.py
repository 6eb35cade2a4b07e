"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from digitization_finder.models import ClientAggregate


class ClientMatchItem(BaseModel):
    """A catalog entry returned by a search, with its confidence."""

    space_id: str
    space_name: str
    folder_name: str
    folder_id: str
    confidence_score: float = Field(..., ge=0.0, le=1.0, description="1 = exact match")


class SearchClientResponse(BaseModel):
    """Response DTO for a client search.

    Exactly one of ``result`` (single), ``results`` (multiple) or
    ``message`` (none) is set, according to ``match``.
    """

    match: str = Field(..., description="'single', 'multiple' or 'none'")
    result: ClientMatchItem | None = None
    results: list[ClientMatchItem] | None = None
    message: str | None = None


class ClientContextResponse(BaseModel):
    """Response DTO for a client's aggregated analytics."""

    success: bool = True
    data: ClientAggregate
    time_range: str
    cached_at: str = Field(..., description="When this response was produced (ISO 8601)")


class CacheInvalidateResponse(BaseModel):
    """Response DTO for cache invalidation."""

    success: bool
    deleted_count: int = Field(..., ge=0)
    message: str


class CacheStatsResponse(BaseModel):
    """Response DTO for analytics cache statistics."""

    total_entries: int = Field(..., ge=0)
    ttl_seconds: float = Field(..., ge=0)


class ReportMetadata(BaseModel):
    folder_name: str
    report_type: str
    generated_at: str
    data_points: dict[str, int]


class GenerateReportResponse(BaseModel):
    """Response DTO for a generated report."""

    success: bool = True
    report: str
    metadata: ReportMetadata
    saved: bool = Field(False, description="Whether the report was recorded in history")


class HistoryResponse(BaseModel):
    """Response DTO wrapping a list of history records."""

    items: list[dict[str, Any]] = Field(default_factory=list)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    history_store_healthy: bool = Field(..., description="Whether Redis is reachable")
    analytics_configured: bool
    catalog_configured: bool
    report_generator_configured: bool
