"""Client catalog protocol."""

from typing import Protocol, runtime_checkable

from digitization_finder.entities import ClientRecord


@runtime_checkable
class CatalogSource(Protocol):
    """Protocol for the source of truth listing every client folder."""

    async def fetch_clients(self) -> list[ClientRecord]:
        """Fetch the full catalog.

        Rows without a folder name or folder id are already dropped.

        Returns:
            Catalog rows in source order
        """
        ...
