"""Google Sheets implementation of CatalogSource.

The client catalog lives in a spreadsheet with one row per client folder:

    A: Space id | B: Space name | C: Folder name | D: Folder id

The first row is a header. Rows missing a folder name or folder id are
dropped here so the matcher never sees them.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from digitization_finder.config import settings
from digitization_finder.entities import ClientRecord
from digitization_finder.errors import ConfigurationError, ParseFailureError, UpstreamFailureError

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEET_RANGE = "A:D"


def rows_to_records(values: list[list[str]]) -> list[ClientRecord]:
    """Convert raw sheet values (header row included) to catalog records."""
    records = []
    for row in values[1:]:
        cells = [str(cell).strip() for cell in row] + [""] * (4 - len(row))
        record = ClientRecord(
            space_id=cells[0],
            space_name=cells[1],
            folder_name=cells[2],
            folder_id=cells[3],
        )
        if record.folder_name and record.folder_id:
            records.append(record)
    return records


class GoogleSheetsCatalogRepository:
    """Reads the client catalog from the Google Sheets values API.

    This class satisfies the CatalogSource protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        sheet_id: str | None = None,
        api_key: str | None = None,
        max_attempts: int | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        timeout: float | None = None,
    ) -> None:
        """Initialize the catalog repository.

        Args:
            sheet_id: Spreadsheet id. Defaults to settings.
            api_key: Google API key. Defaults to settings.
            max_attempts: Attempts before giving up. Defaults to settings.
            client: HTTP client to use. If None, one is created lazily.
            sleep: Awaitable used for backoff delays.
            timeout: Request timeout in seconds for the lazily created client.
        """
        self._sheet_id = sheet_id or settings.google_sheet_id
        self._api_key = api_key or settings.google_sheets_api_key
        self._max_attempts = max_attempts or settings.analytics_max_attempts
        self._client = client
        self._sleep = sleep
        self._timeout = timeout or settings.http_timeout

    @classmethod
    def create(cls, client: httpx.AsyncClient | None = None) -> "GoogleSheetsCatalogRepository":
        """Factory method to create GoogleSheetsCatalogRepository from settings."""
        return cls(client=client)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def url(self) -> str:
        return f"{SHEETS_API_URL}/{self._sheet_id}/values/{SHEET_RANGE}"

    async def _fetch_values(self) -> list[list[str]]:
        error: UpstreamFailureError | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                response = await self.client.get(
                    self.url,
                    params={"key": self._api_key},
                    headers={"Accept": "application/json"},
                )
            except httpx.HTTPError as e:
                error = UpstreamFailureError(f"Google Sheets request failed: {e}")
            else:
                if response.is_success:
                    try:
                        payload = response.json()
                    except ValueError as e:
                        raise ParseFailureError(f"Google Sheets returned invalid JSON: {e}") from e
                    if not isinstance(payload, dict):
                        raise ParseFailureError("Google Sheets response is not a JSON object")
                    return payload.get("values") or []

                logger.error("Google Sheets API error response: %s", response.text[:500])
                error = UpstreamFailureError(
                    f"Google Sheets API error: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                )

            if attempt < self._max_attempts:
                backoff = 2**attempt
                logger.warning(
                    "Google Sheets request failed, retrying in %ds (attempt %d/%d)",
                    backoff,
                    attempt,
                    self._max_attempts,
                )
                await self._sleep(backoff)

        raise error or UpstreamFailureError("Google Sheets request failed after all retries")

    async def fetch_clients(self) -> list[ClientRecord]:
        """Fetch every client folder from the sheet.

        Returns:
            Catalog rows with both folder name and folder id present

        Raises:
            ConfigurationError: If the sheet id or API key is missing
            UpstreamFailureError: If the API kept failing
            ParseFailureError: If the API answered with invalid JSON
        """
        if not self._sheet_id or not self._api_key:
            raise ConfigurationError("Google Sheets configuration missing")

        values = await self._fetch_values()
        logger.info("Fetched %d sheet rows", len(values))

        if not values:
            logger.warning("No data returned from Google Sheets")
            return []

        return rows_to_records(values)

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
