"""ClickHouse implementation of AnalyticsSource.

The ClickHouse HTTP interface sits behind an access gateway (Cloudflare
Access). The gateway occasionally answers with a challenge page instead of
proxying the request; when that happens the query is re-sent straight to
ClickHouse with the native account's basic-auth credentials.

Retry policy per query:
- at most ``max_attempts`` attempts (3 by default)
- a gateway challenge tries the fallback credentials before backing off
- any other failure backs off without trying the fallback
- backoff is ``2 ** attempt`` seconds (2s, then 4s)
- a 2xx body that is not a JSON envelope fails at once, without retry
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from digitization_finder.config import settings
from digitization_finder.errors import (
    ConfigurationError,
    ParseFailureError,
    UpstreamChallengeError,
    UpstreamFailureError,
)

logger = logging.getLogger(__name__)

CHALLENGE_MARKERS = ("Cloudflare", "Just a moment")

# Longest slice of an upstream body written to the log
LOG_BODY_LIMIT = 500

Sleep = Callable[[float], Awaitable[None]]


def is_gateway_challenge(response: httpx.Response) -> bool:
    """Check if a response is the access gateway's challenge page.

    Args:
        response: The HTTP response from the primary credential path

    Returns:
        True for a 4xx response whose body carries a challenge marker
    """
    if not 400 <= response.status_code < 500:
        return False
    return any(marker in response.text for marker in CHALLENGE_MARKERS)


def parse_rows(body: str) -> list[dict[str, Any]]:
    """Parse a ClickHouse ``FORMAT JSON`` body.

    Args:
        body: Raw response text

    Returns:
        The rows from ``{"data": [...]}`` or from a bare JSON array

    Raises:
        ParseFailureError: If the body is not one of those shapes
    """
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse JSON response: %s", body[:LOG_BODY_LIMIT])
        raise ParseFailureError(f"ClickHouse returned invalid JSON: {e}") from e

    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        rows = payload["data"]
    elif isinstance(payload, list):
        rows = payload
    else:
        raise ParseFailureError("ClickHouse response has no 'data' array")

    if not all(isinstance(row, dict) for row in rows):
        raise ParseFailureError("ClickHouse rows must be JSON objects")
    return rows


class ClickHouseAnalyticsRepository:
    """ClickHouse HTTP client with gateway-challenge fallback.

    This class satisfies the AnalyticsSource protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        repository = ClickHouseAnalyticsRepository.create()
        rows = await repository.execute("SELECT 1 AS one FORMAT JSON")
        ```
    """

    def __init__(
        self,
        api_url: str | None = None,
        auth_basic: str | None = None,
        cf_client_id: str | None = None,
        cf_client_secret: str | None = None,
        account_name: str | None = None,
        account_password: str | None = None,
        max_attempts: int | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
        timeout: float | None = None,
    ) -> None:
        """Initialize the ClickHouse repository.

        Args:
            api_url: ClickHouse HTTP endpoint. Defaults to settings.
            auth_basic: Pre-encoded basic token sent with the gateway headers.
            cf_client_id: Access gateway client id.
            cf_client_secret: Access gateway client secret.
            account_name: Native ClickHouse account for the fallback path.
            account_password: Password for the native account.
            max_attempts: Attempts per query before giving up. Defaults to settings.
            client: HTTP client to use. If None, one is created lazily.
            sleep: Awaitable used for backoff delays.
            timeout: Request timeout in seconds for the lazily created client.
        """
        self._api_url = api_url or settings.clickhouse_api_url
        self._auth_basic = auth_basic or settings.clickhouse_auth_basic
        self._cf_client_id = cf_client_id or settings.clickhouse_cf_client_id
        self._cf_client_secret = cf_client_secret or settings.clickhouse_cf_client_secret
        self._account_name = account_name or settings.clickhouse_account_name
        self._account_password = account_password or settings.clickhouse_account_password
        self._max_attempts = max_attempts or settings.analytics_max_attempts
        self._client = client
        self._sleep = sleep
        self._timeout = timeout or settings.http_timeout

        if not self._api_url or not self._auth_basic:
            logger.warning("ClickHouse configuration missing")

    @classmethod
    def create(
        cls,
        client: httpx.AsyncClient | None = None,
    ) -> "ClickHouseAnalyticsRepository":
        """Factory method to create ClickHouseAnalyticsRepository from settings.

        Args:
            client: Shared HTTP client. If None, one is created lazily.

        Returns:
            Configured ClickHouseAnalyticsRepository
        """
        return cls(client=client)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def has_fallback(self) -> bool:
        """Whether the native-account fallback path can be used."""
        return bool(self._account_name and self._account_password)

    def _gateway_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Basic {self._auth_basic or ''}",
            "Content-Type": "text/plain",
            "CF-Access-Client-Id": self._cf_client_id or "",
            "CF-Access-Client-Secret": self._cf_client_secret or "",
        }

    async def _post_with_gateway(self, query: str) -> httpx.Response:
        return await self.client.post(
            self._api_url,
            content=query,
            headers=self._gateway_headers(),
        )

    async def _post_with_account(self, query: str) -> httpx.Response:
        return await self.client.post(
            self._api_url,
            content=query,
            headers={"Content-Type": "text/plain"},
            auth=httpx.BasicAuth(self._account_name, self._account_password),
        )

    async def _try_fallback(self, query: str) -> httpx.Response | None:
        """Re-send the query with the native account.

        Returns:
            The successful response, or None if the fallback is unavailable
            or failed
        """
        if not self.has_fallback:
            logger.warning("No fallback credentials configured; skipping basic auth fallback")
            return None

        try:
            response = await self._post_with_account(query)
        except httpx.HTTPError as e:
            logger.error("Basic auth fallback error: %s", e)
            return None

        if response.is_success:
            logger.info("Basic auth fallback successful")
            return response

        logger.error(
            "Basic auth fallback also failed (%d): %s",
            response.status_code,
            response.text[:LOG_BODY_LIMIT],
        )
        return None

    async def execute(self, query: str) -> list[dict[str, Any]]:
        """Run a query and return its rows.

        Args:
            query: SQL text ending in ``FORMAT JSON``

        Returns:
            Decoded rows

        Raises:
            ConfigurationError: If the endpoint URL is not configured
            UpstreamChallengeError: If the gateway kept blocking every attempt
            UpstreamFailureError: If the endpoint kept failing
            ParseFailureError: If a successful response could not be parsed
        """
        if not self._api_url:
            raise ConfigurationError("ClickHouse configuration missing")

        logger.debug("Executing query: %s...", query.strip()[:100])

        error: UpstreamChallengeError | UpstreamFailureError | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                response = await self._post_with_gateway(query)
            except httpx.HTTPError as e:
                logger.warning(
                    "Request failed (attempt %d/%d): %s", attempt, self._max_attempts, e
                )
                error = UpstreamFailureError(f"ClickHouse request failed: {e}")
            else:
                if response.is_success:
                    logger.debug("Response length: %d", len(response.text))
                    return parse_rows(response.text)

                if is_gateway_challenge(response):
                    logger.warning(
                        "Access gateway blocked request (attempt %d/%d). Trying basic auth fallback...",
                        attempt,
                        self._max_attempts,
                    )
                    fallback = await self._try_fallback(query)
                    if fallback is not None:
                        return parse_rows(fallback.text)
                    error = UpstreamChallengeError(
                        "ClickHouse query failed: access gateway blocking requests"
                    )
                else:
                    logger.error(
                        "Query failed (%d): %s",
                        response.status_code,
                        response.text[:LOG_BODY_LIMIT],
                    )
                    error = UpstreamFailureError(
                        f"ClickHouse query failed: {response.status_code}",
                        status_code=response.status_code,
                    )

            if attempt < self._max_attempts:
                backoff = 2**attempt
                logger.warning(
                    "Retrying in %ds (attempt %d/%d)", backoff, attempt, self._max_attempts
                )
                await self._sleep(backoff)

        logger.error("All %d attempts exhausted", self._max_attempts)
        raise error or UpstreamFailureError("ClickHouse query failed after all retries")

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
