"""HTTP handlers for AI report generation."""

import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status

from digitization_finder.dto import GenerateReportRequest, GenerateReportResponse, HistoryResponse, ReportMetadata
from digitization_finder.entities import TimeRange
from digitization_finder.services import AnalyticsCacheService, ReportService

from .errors import http_error

logger = logging.getLogger(__name__)


class ReportHandler:
    """HTTP handlers for generating and listing client reports."""

    def __init__(self, cache_service: AnalyticsCacheService, report_service: ReportService) -> None:
        """Initialize the report handler.

        Args:
            cache_service: Source of client aggregates (required).
            report_service: Report generation and history (required).
        """
        self._cache = cache_service
        self._reports = report_service

    async def generate_report(
        self,
        request: GenerateReportRequest,
        user_id: str | None = None,
    ) -> GenerateReportResponse:
        """Handle POST /api/generate-report requests.

        The report is saved to history only when both a user and a folder id
        are known.

        Raises:
            HTTPException: 404 when the client has no data, otherwise mapped
                from the failing service
        """
        logger.info("Generating %s report for %s", request.report_type, request.folder_name)
        try:
            data = await self._cache.get_aggregate(request.folder_name, TimeRange.CURRENT_YEAR)
        except Exception as e:
            raise http_error(e, "fetch client context") from e

        if not data.basic_info:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No data available for client: {request.folder_name}",
            )

        try:
            report = await self._reports.generate(request.folder_name, data, request.report_type)
        except Exception as e:
            logger.exception("Error generating report")
            raise http_error(e, "generate report") from e

        saved = False
        if user_id and request.folder_id:
            saved = (
                self._reports.save(
                    user_id=user_id,
                    client=request.folder_name,
                    folder_id=request.folder_id,
                    report_type=request.report_type,
                    content=report,
                )
                is not None
            )

        return GenerateReportResponse(
            report=report,
            saved=saved,
            metadata=ReportMetadata(
                folder_name=request.folder_name,
                report_type=request.report_type,
                generated_at=datetime.now(timezone.utc).isoformat(),
                data_points={
                    "basic_info": len(data.basic_info),
                    "performance_metrics": len(data.performance_metrics),
                    "recent_activities": len(data.recent_activities),
                },
            ),
        )

    async def list_reports(self, user_id: str, limit: int = 20) -> HistoryResponse:
        """Handle GET /api/reports requests."""
        try:
            return HistoryResponse(items=self._reports.history(user_id, limit=limit))
        except Exception as e:
            raise http_error(e, "fetch report history") from e
