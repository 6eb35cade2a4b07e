"""Analytics source protocol.

Defines the interface for anything that can run a SQL query against the
analytics warehouse and hand back decoded rows.

Implementations can include:
- ClickHouse HTTP interface behind an access gateway (default)
- In-memory fakes for tests
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AnalyticsSource(Protocol):
    """Protocol for analytics query backends."""

    async def execute(self, query: str) -> list[dict[str, Any]]:
        """Run a query and return its rows.

        Args:
            query: SQL text, already formatted for the warehouse

        Returns:
            Decoded rows, one dict per row

        Raises:
            UpstreamError: If the query could not be completed
        """
        ...
