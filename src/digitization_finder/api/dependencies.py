"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

import httpx
from fastapi import Depends, FastAPI, Header, HTTPException, Request, status

from digitization_finder.config import configure_logging, settings
from digitization_finder.handlers import ClientContextHandler, HistoryHandler, ReportHandler, SearchHandler
from digitization_finder.protocols import HistoryStore
from digitization_finder.repositories import (
    ClickHouseAnalyticsRepository,
    GoogleSheetsCatalogRepository,
    OpenAIReportProvider,
    RedisHistoryRepository,
)
from digitization_finder.services import AnalyticsCacheService, ClientSearchService, ReportService

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_search_handler(request: Request) -> SearchHandler:
    """Dependency injection for SearchHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "search_handler")


def get_client_handler(request: Request) -> ClientContextHandler:
    """Dependency injection for ClientContextHandler from app.state."""
    return _from_state(request, "client_handler")


def get_report_handler(request: Request) -> ReportHandler:
    """Dependency injection for ReportHandler from app.state."""
    return _from_state(request, "report_handler")


def get_history_handler(request: Request) -> HistoryHandler:
    """Dependency injection for HistoryHandler from app.state."""
    return _from_state(request, "history_handler")


def get_history_store(request: Request) -> HistoryStore:
    """Dependency injection for the history store from app.state."""
    return _from_state(request, "history_store")


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """The authenticated user, as forwarded by the authenticating proxy.

    Raises:
        HTTPException: 401 if the header is missing
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id


def get_optional_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str | None:
    return x_user_id or None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (data access) sharing one HTTP client
    2. Services (business logic)
    3. Handlers (HTTP endpoints)

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Closes the HTTP and Redis clients and removes everything from app.state
    """
    configure_logging()

    http_client = httpx.AsyncClient(
        timeout=settings.http_timeout,
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )

    analytics = ClickHouseAnalyticsRepository.create(client=http_client)
    catalog = GoogleSheetsCatalogRepository.create(client=http_client)
    generator = OpenAIReportProvider.create(client=http_client)
    history_store = RedisHistoryRepository.create()

    cache_service = AnalyticsCacheService.create(source=analytics)
    search_service = ClientSearchService(catalog=catalog)
    report_service = ReportService(generator=generator, history=history_store)

    app.state.http_client = http_client
    app.state.history_store = history_store
    app.state.cache_service = cache_service
    app.state.search_handler = SearchHandler(search_service=search_service)
    app.state.client_handler = ClientContextHandler(cache_service=cache_service)
    app.state.report_handler = ReportHandler(cache_service=cache_service, report_service=report_service)
    app.state.history_handler = HistoryHandler(store=history_store)

    logger.info("Analytics cache initialized (ttl=%ss)", cache_service.ttl)
    logger.info("Report model: %s", generator.model_name)
    logger.info("Redis URL: %s", settings.redis_url)

    try:
        yield
    finally:
        await http_client.aclose()
        history_store.close()
        for name in (
            "history_handler",
            "report_handler",
            "client_handler",
            "search_handler",
            "cache_service",
            "history_store",
            "http_client",
        ):
            delattr(app.state, name)
        logger.info("Digitization Finder shut down")


# Type aliases for cleaner dependency injection
SearchHandlerDep = Annotated[SearchHandler, Depends(get_search_handler)]
ClientHandlerDep = Annotated[ClientContextHandler, Depends(get_client_handler)]
ReportHandlerDep = Annotated[ReportHandler, Depends(get_report_handler)]
HistoryHandlerDep = Annotated[HistoryHandler, Depends(get_history_handler)]
HistoryStoreDep = Annotated[HistoryStore, Depends(get_history_store)]
UserIdDep = Annotated[str, Depends(get_user_id)]
OptionalUserIdDep = Annotated[str | None, Depends(get_optional_user_id)]
