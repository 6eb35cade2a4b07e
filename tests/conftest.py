"""
Shared fixtures and test doubles.
"""

import asyncio
from typing import Any

import pytest

from digitization_finder.entities import ClientRecord


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAnalyticsSource:
    """Answers each sub-query with canned rows and records every query."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.queries: list[str] = []
        self.fail_on = fail_on

    async def execute(self, query: str) -> list[dict[str, Any]]:
        self.queries.append(query)
        # Yield so concurrent callers interleave like real I/O
        await asyncio.sleep(0)

        if self.fail_on and self.fail_on in query:
            raise RuntimeError("warehouse unavailable")

        if "new_build_count" in query:
            return [{"entity_to_create_fund": "Apogem", "new_build_count": "3", "update_count": "7", "idm_count": "1"}]
        if "avg_effort_new_form" in query:
            return [{"year_month": "2025-05", "avg_effort_new_form": 12.5, "avg_days_new_form": 9.0, "avg_days_update": None}]
        if "LIMIT" in query:
            return [{"clickup_id": "t1", "fund_name": "Apogem Fund I", "name": "Update sub-doc", "complexity_level": "Light"}]
        return [
            {
                "entity_to_create_fund": "Apogem",
                "clickup_id": "c1",
                "fund_name": "Apogem Fund I",
                "partner": "Jane Roe",
                "complexity_level": "Medium",
                "digitization_process_version": "Blueprint",
            }
        ]


class FakeCatalog:
    """CatalogSource returning a fixed list."""

    def __init__(self, records: list[ClientRecord]) -> None:
        self.records = records
        self.calls = 0

    async def fetch_clients(self) -> list[ClientRecord]:
        self.calls += 1
        return list(self.records)


class FakeReportGenerator:
    """ReportGenerator that echoes a canned report and records its inputs."""

    model_name = "fake-model"

    def __init__(self, reply: str = "Executive Summary: steady growth.") -> None:
        self.reply = reply
        self.calls: list[tuple[list[dict[str, str]], int]] = []

    async def complete(self, messages: list[dict[str, str]], max_tokens: int, temperature: float = 0.7) -> str:
        self.calls.append((messages, max_tokens))
        return self.reply


class InMemoryHistoryStore:
    """HistoryStore kept in dictionaries."""

    def __init__(self, search_limit: int = 5) -> None:
        self.search_limit = search_limit
        self.searches: dict[str, list[dict[str, Any]]] = {}
        self.notes: dict[tuple[str, str], dict[str, Any]] = {}
        self.reports: dict[str, list[dict[str, Any]]] = {}

    def add_search(self, user_id: str, folder_id: str, client_name: str) -> dict[str, Any]:
        record = {"user_id": user_id, "client_folder_id": folder_id, "client_name": client_name}
        items = [s for s in self.searches.get(user_id, []) if s["client_folder_id"] != folder_id]
        self.searches[user_id] = [record, *items][: self.search_limit]
        return record

    def get_searches(self, user_id: str) -> list[dict[str, Any]]:
        return list(self.searches.get(user_id, []))

    def get_note(self, user_id: str, folder_id: str) -> dict[str, Any] | None:
        return self.notes.get((user_id, folder_id))

    def save_note(self, user_id: str, folder_id: str, note: str) -> dict[str, Any]:
        record = {"user_id": user_id, "client_folder_id": folder_id, "note": note}
        self.notes[(user_id, folder_id)] = record
        return record

    def add_report(self, user_id: str, report: dict[str, Any]) -> dict[str, Any]:
        record = {**report, "id": f"r{len(self.reports.get(user_id, [])) + 1}", "user_id": user_id}
        self.reports.setdefault(user_id, []).insert(0, record)
        return record

    def get_reports(self, user_id: str, limit: int = 20) -> list[dict[str, Any]]:
        return self.reports.get(user_id, [])[:limit]

    def health_check(self) -> bool:
        return True


@pytest.fixture
def catalog() -> list[ClientRecord]:
    """A small client catalog."""
    return [
        ClientRecord(space_id="s1", space_name="Funds", folder_name="Apogem", folder_id="f1"),
        ClientRecord(space_id="s1", space_name="Funds", folder_name="Apex Holdings", folder_id="f2"),
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def analytics_source() -> FakeAnalyticsSource:
    return FakeAnalyticsSource()
