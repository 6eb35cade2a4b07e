from typing import Any

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from digitization_finder.api.dependencies import (
    ClientHandlerDep,
    HistoryHandlerDep,
    HistoryStoreDep,
    OptionalUserIdDep,
    ReportHandlerDep,
    SearchHandlerDep,
    UserIdDep,
    lifespan,
)
from digitization_finder.config import settings
from digitization_finder.dto import (
    CacheInvalidateResponse,
    CacheStatsResponse,
    ClientContextResponse,
    ClientNoteRequest,
    GenerateReportRequest,
    GenerateReportResponse,
    HealthCheckResponse,
    HistoryResponse,
    SearchClientRequest,
    SearchClientResponse,
    SearchHistoryRequest,
)
from digitization_finder.entities import TimeRange

app = FastAPI(
    title="Digitization Finder API",
    description="Client search, cached warehouse analytics and AI client reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Digitization Finder API",
        "version": "0.1.0",
        "description": "Client search, cached warehouse analytics and AI client reports",
        "endpoints": {
            "search": "/api/search-client",
            "client_context": "/api/client-context",
            "generate_report": "/api/generate-report",
            "reports": "/api/reports",
            "search_history": "/api/search-history",
            "client_notes": "/api/client-notes",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(store: HistoryStoreDep) -> HealthCheckResponse:
    """Health check endpoint."""
    store_healthy = store.health_check()
    response = HealthCheckResponse(
        status="healthy" if store_healthy else "unhealthy",
        history_store_healthy=store_healthy,
        analytics_configured=bool(settings.clickhouse_api_url and settings.clickhouse_auth_basic),
        catalog_configured=bool(settings.google_sheet_id and settings.google_sheets_api_key),
        report_generator_configured=bool(settings.openai_api_key),
    )
    if not store_healthy:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=response.model_dump(),
        )
    return response


@app.post("/api/search-client", response_model=SearchClientResponse, response_model_exclude_none=True)
async def search_client(request: SearchClientRequest, handler: SearchHandlerDep) -> SearchClientResponse:
    """Fuzzy-search the client catalog."""
    return await handler.search_client(request)


@app.get("/api/clients/{folder_id}")
async def get_client(folder_id: str, handler: SearchHandlerDep) -> dict[str, str]:
    """Look up a client by folder id."""
    return await handler.get_client(folder_id)


@app.get("/api/client-context", response_model=ClientContextResponse)
async def get_client_context(
    handler: ClientHandlerDep,
    folder_name: str = Query(..., alias="folderName", min_length=1),
    time_range: TimeRange = Query(TimeRange.CURRENT_YEAR, alias="timeRange"),
) -> ClientContextResponse:
    """Aggregated analytics for a client, cached for 24 hours."""
    return await handler.get_context(folder_name, time_range)


@app.get("/api/client-context/cache", response_model=CacheStatsResponse)
async def get_cache_stats(handler: ClientHandlerDep) -> CacheStatsResponse:
    """Analytics cache statistics."""
    return await handler.get_stats()


@app.delete("/api/client-context/cache", response_model=CacheInvalidateResponse)
async def clear_cache(
    handler: ClientHandlerDep,
    folder_name: str | None = Query(None, alias="folderName"),
) -> CacheInvalidateResponse:
    """Clear one client's cached analytics, or the whole cache."""
    return await handler.invalidate(folder_name)


@app.post("/api/generate-report", response_model=GenerateReportResponse)
async def generate_report(
    request: GenerateReportRequest,
    handler: ReportHandlerDep,
    user_id: OptionalUserIdDep,
) -> GenerateReportResponse:
    """Generate an AI report for a client."""
    return await handler.generate_report(request, user_id=user_id)


@app.get("/api/reports", response_model=HistoryResponse)
async def list_reports(
    handler: ReportHandlerDep,
    user_id: UserIdDep,
    limit: int = Query(20, ge=1, le=100),
) -> HistoryResponse:
    """The user's generated reports, newest first."""
    return await handler.list_reports(user_id, limit=limit)


@app.get("/api/search-history", response_model=HistoryResponse)
async def get_search_history(handler: HistoryHandlerDep, user_id: UserIdDep) -> HistoryResponse:
    """The user's recent searches, newest first."""
    return await handler.get_searches(user_id)


@app.post("/api/search-history")
async def add_search_history(
    request: SearchHistoryRequest,
    handler: HistoryHandlerDep,
    user_id: UserIdDep,
) -> dict[str, Any]:
    """Record a searched client."""
    return await handler.add_search(user_id, request)


@app.get("/api/client-notes")
async def get_client_note(
    handler: HistoryHandlerDep,
    user_id: UserIdDep,
    client_folder_id: str = Query(..., alias="clientFolderId"),
) -> dict[str, Any]:
    """The user's note for a client."""
    return await handler.get_note(user_id, client_folder_id)


@app.post("/api/client-notes")
async def save_client_note(
    request: ClientNoteRequest,
    handler: HistoryHandlerDep,
    user_id: UserIdDep,
) -> dict[str, Any]:
    """Create or replace the user's note for a client."""
    return await handler.save_note(user_id, request)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "digitization_finder.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
