"""SQL for the four analytic sub-queries behind a client aggregate.

All queries read ``dbt_int.int_digitization_consolidate`` and return
ClickHouse ``FORMAT JSON`` envelopes.
"""

from digitization_finder.entities import TimeRange

TABLE = "dbt_int.int_digitization_consolidate"

# Earliest date the warehouse holds reliable data for
ALL_TIME_START = "2024-01-01"

FORM_BUILD_URL = "https://portal.anduin.app/pantheon/form/"

_COMMON_FILTERS = """entity_to_create_fund = '{client}'
  AND entity_to_create_fund <> '#Non digitization tasks'
  AND status IN ('done', 'completed')
  AND task_group NOT IN ('TBC')
  AND status NOT IN ('paused', 'cancelled')"""


def escape_literal(value: str) -> str:
    """Escape a value for use inside a single-quoted SQL string."""
    return value.replace("\\", "\\\\").replace("'", "''")


def range_start(time_range: TimeRange) -> str:
    """SQL expression for the first day of the time range."""
    if time_range is TimeRange.TWO_YEARS:
        return "DATE_TRUNC('year', CURRENT_DATE()) - INTERVAL '1 year'"
    if time_range is TimeRange.ALL_TIME:
        return f"'{ALL_TIME_START}'"
    return "DATE_TRUNC('year', CURRENT_DATE())"


def due_date_filter(time_range: TimeRange) -> str:
    return f"due_date >= {range_start(time_range)} AND due_date <= CURRENT_DATE()"


def start_date_filter(time_range: TimeRange) -> str:
    return f"start_date >= {range_start(time_range)}"


def _where(client: str, *extra: str) -> str:
    clauses = [_COMMON_FILTERS.format(client=escape_literal(client)), *extra]
    return "\n  AND ".join(clauses)


def basic_info_query(client: str, time_range: TimeRange) -> str:
    """Delivered new-form builds, oldest first."""
    return f"""
SELECT
    entity_to_create_fund, id AS clickup_id,
    fund_name, law_firm, fund_admin, partner,
    investment_type, fund_structure, fund_engagement, complexity_level, year_month,
    CASE
        WHEN digitization_process_version = 'V3 - Blueprint' THEN 'Blueprint'
        WHEN digitization_process_version = 'V2 (No Form Structure)' THEN 'Checklist'
        ELSE digitization_process_version
    END AS digitization_process_version,
    CASE
        WHEN form_id IS NOT NULL THEN '{FORM_BUILD_URL}' || form_id || '/build'
        ELSE NULL
    END AS form_link
FROM {TABLE}
WHERE
  {_where(client, due_date_filter(time_range), "task_group = 'New Form'", "row_num = 1")}
ORDER BY due_date ASC
FORMAT JSON
"""


def project_counts_query(client: str, time_range: TimeRange) -> str:
    """Distinct project counts per task group.

    IDM and Integration are always counted from ``ALL_TIME_START`` whatever
    the selected range.
    """
    since = start_date_filter(time_range)
    fixed = f"start_date >= '{ALL_TIME_START}'"

    def count(task_group: str, date_filter: str, alias: str) -> str:
        return (
            f"    COUNT(DISTINCT CASE WHEN task_group = '{task_group}' "
            f"AND {date_filter} THEN id END) AS {alias}"
        )

    columns = ",\n".join(
        [
            count("New Form", since, "new_build_count"),
            count("Update", since, "update_count"),
            count("Export", since, "export_count"),
            count("Import", since, "import_count"),
            count("IDM", fixed, "idm_count"),
            count("Integration", fixed, "integration_count"),
        ]
    )
    return f"""
SELECT
    entity_to_create_fund,
{columns}
FROM {TABLE}
WHERE {_where(client)}
GROUP BY entity_to_create_fund
ORDER BY entity_to_create_fund
FORMAT JSON
"""


def performance_metrics_query(client: str, time_range: TimeRange) -> str:
    """Monthly average effort and delivery days."""
    return f"""
SELECT
    entity_to_create_fund, year_month,
    AVG(CASE WHEN task_group = 'New Form' THEN form_building_squad_total_effort END) AS avg_effort_new_form,
    AVG(CASE WHEN task_group = 'New Form' THEN actual_days_to_dlv END) AS avg_days_new_form,
    AVG(CASE WHEN task_group = 'Update' THEN actual_days_to_dlv END) AS avg_days_update
FROM {TABLE}
WHERE {_where(client, due_date_filter(time_range))}
GROUP BY entity_to_create_fund, year_month
ORDER BY year_month DESC
FORMAT JSON
"""


def recent_activities_query(client: str, time_range: TimeRange, limit: int = 5) -> str:
    """The most recently due completed tasks."""
    where = _where(
        client,
        due_date_filter(time_range),
        "NOT (task_group = 'Validation' AND no_request_during_validation = 'true')",
    )
    return f"""
SELECT DISTINCT
    id AS clickup_id, fund_name, name, complexity_level, due_date
FROM {TABLE}
WHERE {where}
ORDER BY due_date DESC
LIMIT {limit}
FORMAT JSON
"""


SUB_QUERIES = {
    "basic_info": basic_info_query,
    "project_counts": project_counts_query,
    "performance_metrics": performance_metrics_query,
    "recent_activities": recent_activities_query,
}
