"""Typed records for rows returned by the analytics warehouse.

Rows are validated and coerced as soon as they are received. ClickHouse's
JSON output quotes 64-bit integers, so counts may arrive as strings; lax
pydantic coercion turns them back into ints. Unknown columns are kept.
"""

from typing import Any

from pydantic import BaseModel


class ClientBasicInfo(BaseModel):
    """One delivered new-form build for the client."""

    entity_to_create_fund: str | None = None
    clickup_id: str | None = None
    fund_name: str | None = None
    law_firm: str | None = None
    fund_admin: str | None = None
    partner: str | None = None
    investment_type: str | None = None
    fund_structure: str | None = None
    fund_engagement: str | None = None
    complexity_level: str | None = None
    year_month: str | None = None
    digitization_process_version: str | None = None
    form_link: str | None = None

    model_config = {"extra": "allow", "coerce_numbers_to_str": True}


class ProjectCounts(BaseModel):
    """Project volume by task group."""

    entity_to_create_fund: str | None = None
    new_build_count: int = 0
    update_count: int = 0
    export_count: int = 0
    import_count: int = 0
    idm_count: int = 0
    integration_count: int = 0

    model_config = {"extra": "allow", "coerce_numbers_to_str": True}

    @property
    def total(self) -> int:
        """Sum of every project category."""
        return (
            self.new_build_count
            + self.update_count
            + self.export_count
            + self.import_count
            + self.idm_count
            + self.integration_count
        )


class PerformanceMetric(BaseModel):
    """Monthly delivery averages."""

    entity_to_create_fund: str | None = None
    year_month: str | None = None
    avg_effort_new_form: float | None = None
    avg_days_new_form: float | None = None
    avg_days_update: float | None = None

    model_config = {"extra": "allow", "coerce_numbers_to_str": True}


class RecentActivity(BaseModel):
    """A recently completed task."""

    clickup_id: str | None = None
    fund_name: str | None = None
    name: str | None = None
    complexity_level: str | None = None
    due_date: str | None = None

    model_config = {"extra": "allow", "coerce_numbers_to_str": True}


class ClientAggregate(BaseModel):
    """Combined result of the four analytic sub-queries for one client.

    The four parts are always fetched and cached together.
    """

    basic_info: list[ClientBasicInfo] = []
    project_counts: ProjectCounts | None = None
    performance_metrics: list[PerformanceMetric] = []
    recent_activities: list[RecentActivity] = []

    @classmethod
    def from_rows(
        cls,
        basic_info: list[dict[str, Any]],
        project_counts: list[dict[str, Any]],
        performance_metrics: list[dict[str, Any]],
        recent_activities: list[dict[str, Any]],
    ) -> "ClientAggregate":
        """Build an aggregate from raw sub-query rows.

        Only the first project-count row is used; the query groups by client
        so there is at most one.
        """
        return cls(
            basic_info=[ClientBasicInfo.model_validate(row) for row in basic_info],
            project_counts=ProjectCounts.model_validate(project_counts[0]) if project_counts else None,
            performance_metrics=[PerformanceMetric.model_validate(row) for row in performance_metrics],
            recent_activities=[RecentActivity.model_validate(row) for row in recent_activities],
        )


# Row model for each analytic sub-query, keyed by sub-query name
ROW_MODELS: dict[str, type[BaseModel]] = {
    "basic_info": ClientBasicInfo,
    "project_counts": ProjectCounts,
    "performance_metrics": PerformanceMetric,
    "recent_activities": RecentActivity,
}
