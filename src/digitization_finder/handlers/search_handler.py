"""HTTP handlers for client search."""

import logging
from dataclasses import asdict

from fastapi import HTTPException, status

from digitization_finder.dto import ClientMatchItem, SearchClientRequest, SearchClientResponse
from digitization_finder.entities import MatchCandidate, MatchType
from digitization_finder.services import ClientSearchService

from .errors import http_error

logger = logging.getLogger(__name__)


def _to_item(candidate: MatchCandidate) -> ClientMatchItem:
    return ClientMatchItem(**asdict(candidate.record), confidence_score=candidate.score)


class SearchHandler:
    """HTTP handlers for searching the client catalog.

    Converts search decisions into the ``single`` / ``multiple`` / ``none``
    response shapes the dashboard expects.
    """

    def __init__(self, search_service: ClientSearchService) -> None:
        """Initialize the search handler.

        Args:
            search_service: The client search service (required).
        """
        self._search = search_service

    async def search_client(self, request: SearchClientRequest) -> SearchClientResponse:
        """Handle POST /api/search-client requests.

        Raises:
            HTTPException: 400 for a too-short query, 500 when the catalog is
                empty, upstream errors mapped by category
        """
        if len(request.query.strip()) < 2:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Query must be at least 2 characters",
            )

        try:
            catalog = await self._search.fetch_catalog()
        except Exception as e:
            logger.exception("Search client error")
            raise http_error(e, "search clients") from e

        logger.info("Got catalog data, rows: %d", len(catalog))
        if not catalog:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="No client data available. Please check Google Sheets connection.",
            )

        decision = await self._search.search(request.query, catalog)

        if decision.kind is MatchType.SINGLE:
            return SearchClientResponse(match=decision.kind.value, result=_to_item(decision.candidates[0]))
        if decision.kind is MatchType.MULTIPLE:
            return SearchClientResponse(
                match=decision.kind.value,
                results=[_to_item(candidate) for candidate in decision.candidates],
            )
        return SearchClientResponse(
            match=decision.kind.value,
            message=f"No clients found matching '{request.query}'. Try a different spelling.",
        )

    async def get_client(self, folder_id: str) -> dict:
        """Handle GET /api/clients/{folder_id} requests.

        Raises:
            HTTPException: 404 if no client has that folder id
        """
        try:
            record = await self._search.get_client(folder_id)
        except Exception as e:
            raise http_error(e, "look up client") from e

        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No client with folder id '{folder_id}'",
            )
        return asdict(record)
