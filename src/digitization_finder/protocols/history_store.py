"""History storage protocol.

Per-user application state: recent searches, client notes and generated
reports. Implementations can include Redis (default) or a relational
database.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class HistoryStore(Protocol):
    """Protocol for per-user application state storage."""

    def add_search(self, user_id: str, folder_id: str, client_name: str) -> dict[str, Any]:
        """Record a searched client, moving it to the top if already present.

        Returns:
            The stored search record
        """
        ...

    def get_searches(self, user_id: str) -> list[dict[str, Any]]:
        """Return the user's recent searches, newest first."""
        ...

    def get_note(self, user_id: str, folder_id: str) -> dict[str, Any] | None:
        """Return the user's note for a client, if any."""
        ...

    def save_note(self, user_id: str, folder_id: str, note: str) -> dict[str, Any]:
        """Insert or replace the user's note for a client.

        Returns:
            The stored note record
        """
        ...

    def add_report(self, user_id: str, report: dict[str, Any]) -> dict[str, Any]:
        """Append a generated report to the user's history.

        Returns:
            The stored report record, with ``id`` and ``created_at`` set
        """
        ...

    def get_reports(self, user_id: str, limit: int = 20) -> list[dict[str, Any]]:
        """Return the user's reports, newest first."""
        ...

    def health_check(self) -> bool:
        """Check if the store is reachable."""
        ...
