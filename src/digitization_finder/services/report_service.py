"""AI-written client report generation.

Builds the prompt from a client aggregate, calls the language model and
records the result in the user's report history.
"""

import logging
import re
from collections import Counter
from typing import Any

from digitization_finder.models import ClientAggregate, ProjectCounts
from digitization_finder.protocols import HistoryStore, ReportGenerator

logger = logging.getLogger(__name__)

FULL_REPORT = "full"
QUICK_REPORT = "quick"

FULL_REPORT_MAX_TOKENS = 800
QUICK_REPORT_MAX_TOKENS = 150

SYSTEM_PROMPT = """You are an internal operations analyst for a fund digitization team. Your main product is fund subscription form implementation (new funds). Generate a strategic client report analyzing the provided data.

IMPORTANT CONTEXT:
- New Builds = Fund implementations (our core product). Each represents a complete fund subscription form
- Updates = Enhancement batches sent by clients across ALL their funds (Fund A may have 5 updates, Fund B may have 10, total shown is cumulative)
- The client name is the organization; individual fund names in historical data are examples of funds implemented, NOT the entire client profile
- IDM and Integration Hub are value-added services that create dependencies when updating sub-docs

Generate 5 sections (200-250 words total):
1. Executive Summary: Strategic overview of client engagement and fund implementation activity
2. Digitization Pipeline: Breakdown of fund implementations vs. cumulative updates across all funds, plus value-added services (IDM/Integration/Import/Export)
3. Fund Portfolio Insights: Comment on fund distribution, complexity trends, and digitization approach (Blueprint vs. Checklist)
4. Performance Trends: Delivery efficiency for new funds and update turnaround times; identify improvements or concerns
5. Operational Notes: If IDM or Integration services exist, include alert: "When updating sub-docs, coordinate with squad to review mapping impacts (Integration workflow/templates and IDM cross-fund mappings). DO should verify during review."

Use concrete data. Avoid markdown symbols (#, **). Use plain text with section labels followed by colons. Be specific and actionable for internal operations team."""

QUICK_SYSTEM_PROMPT = "You are a business analyst. Generate concise 2-3 sentence client summaries."


def _fmt(value: float | None) -> str:
    return f"{value:.1f}" if value is not None else "N/A"


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def _services_flag(counts: ProjectCounts) -> str:
    services = []
    if counts.idm_count > 0:
        services.append("IDM")
    if counts.integration_count > 0:
        services.append("INTEGRATION HUB")
    if not services:
        return "- No mapping services detected"
    return f"- CLIENT HAS {' AND '.join(services)} SERVICES"


def build_report_prompt(client: str, data: ClientAggregate) -> str:
    """Render the full operations-report prompt for a client."""
    funds = data.basic_info
    fund_count = len(funds)
    latest = funds[0] if funds else None
    counts = data.project_counts or ProjectCounts()

    versions = list(dict.fromkeys(f.digitization_process_version for f in funds if f.digitization_process_version))
    complexity = Counter(f.complexity_level or "Unknown" for f in funds)
    fund_examples = ", ".join(f.fund_name for f in funds[:3] if f.fund_name)
    has_mapping_services = counts.idm_count > 0 or counts.integration_count > 0

    performance = "\n".join(
        f"- {m.year_month}: {_fmt(m.avg_effort_new_form)} hrs effort, "
        f"{_fmt(m.avg_days_new_form)} days (new fund), {_fmt(m.avg_days_update)} days (updates)"
        for m in data.performance_metrics[:6]
    )
    activities = "\n".join(
        f"- {a.name or 'Unnamed task'} ({a.fund_name or 'Unknown fund'}): "
        f"{a.complexity_level or 'Unknown'} complexity"
        for a in data.recent_activities[:5]
    )

    def latest_field(name: str) -> str:
        return (getattr(latest, name) if latest else None) or "N/A"

    return f"""Generate an internal operations report for CLIENT: {client}

CLIENT CONTEXT:
- Organization: {client} (the actual client entity)
- Key Contact: {latest_field("partner")}
- Primary Law Firm: {latest_field("law_firm")}
- Fund Administrator: {latest_field("fund_admin")}
- Investment Focus: {latest_field("investment_type")}

FUND PORTFOLIO:
- Total Funds Implemented: {fund_count} fund{_plural(fund_count)}
- Example Funds: {fund_examples or "N/A"}
- Digitization Approach: {" and ".join(versions) or "N/A"}
- Complexity Breakdown: {", ".join(f"{count} {level}" for level, count in complexity.items())}
- Typical Engagement Type: {latest_field("fund_engagement")}

DIGITIZATION PIPELINE (Total: {counts.total} activities):
- Fund Implementations (New Builds): {counts.new_build_count} - Each is a complete fund subscription form
- Cumulative Updates: {counts.update_count} - Total update batches across ALL {fund_count} fund{_plural(fund_count)} (not per-fund)
- Data Services: {counts.export_count} exports, {counts.import_count} imports
- Value-Added Services: {counts.idm_count} IDM projects, {counts.integration_count} Integration Hub projects

PERFORMANCE TRENDS (Last 6 months):
{performance or "No performance data available"}

RECENT ACTIVITY:
{activities or "No recent activities"}

IMPORTANT FLAGS:
{_services_flag(counts)}

Generate a 200-250 word report with these sections:
1. Executive Summary: Overall client relationship and fund implementation volume
2. Digitization Pipeline: Fund implementations vs. update activity ratio, value-added services
3. Fund Portfolio Insights: Complexity trends, digitization approach, fund types
4. Performance Trends: Efficiency metrics, improvement areas, bottlenecks
5. Operational Notes: {"MUST include mapping coordination alert for sub-doc updates" if has_mapping_services else "General operational considerations"}

Use plain text. No markdown. Section labels followed by colons."""


def build_quick_prompt(client: str, data: ClientAggregate) -> str:
    """Render the one-line prompt for a short summary."""
    latest = data.basic_info[0] if data.basic_info else None
    counts = data.project_counts or ProjectCounts()
    investment_type = (latest.investment_type if latest else None) or "Unknown"
    partner = (latest.partner if latest else None) or "Unknown"
    return (
        f'Summarize client "{client}": {investment_type} investment type, '
        f"{counts.total} total projects ({counts.new_build_count} new builds, "
        f"{counts.update_count} updates), partner: {partner}"
    )


def report_file_name(client: str) -> str:
    return f"{re.sub(r'[^a-z0-9]', '_', client, flags=re.IGNORECASE)}_client_report.txt"


class ReportService:
    """Generates client reports and keeps the user's report history."""

    def __init__(self, generator: ReportGenerator, history: HistoryStore | None = None) -> None:
        """Initialize the report service.

        Args:
            generator: Language model backend (required).
            history: Where generated reports are recorded. Optional.
        """
        self._generator = generator
        self._history = history

    async def generate(self, client: str, data: ClientAggregate, report_type: str = FULL_REPORT) -> str:
        """Generate a full or quick report for the client.

        Raises:
            ValueError: If the report type is unknown
            ReportGenerationError: If the model call fails
        """
        if report_type == FULL_REPORT:
            messages = [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_report_prompt(client, data)},
            ]
            max_tokens = FULL_REPORT_MAX_TOKENS
        elif report_type == QUICK_REPORT:
            messages = [
                {"role": "system", "content": QUICK_SYSTEM_PROMPT},
                {"role": "user", "content": build_quick_prompt(client, data)},
            ]
            max_tokens = QUICK_REPORT_MAX_TOKENS
        else:
            raise ValueError(f"Unknown report type: {report_type}")

        logger.info("Generating %s report for %s with %s", report_type, client, self._generator.model_name)
        return await self._generator.complete(messages, max_tokens=max_tokens)

    def save(
        self,
        user_id: str,
        client: str,
        folder_id: str,
        report_type: str,
        content: str,
    ) -> dict[str, Any] | None:
        """Record a report in the user's history.

        A failed save does not fail report generation; it is logged and
        None is returned.
        """
        if self._history is None:
            return None
        try:
            return self._history.add_report(
                user_id,
                {
                    "client_name": client,
                    "folder_id": folder_id,
                    "report_type": report_type,
                    "report_content": content,
                    "file_name": report_file_name(client),
                },
            )
        except Exception:
            logger.exception("Error saving report to history")
            return None

    def history(self, user_id: str, limit: int = 20) -> list[dict[str, Any]]:
        if self._history is None:
            return []
        return self._history.get_reports(user_id, limit=limit)
