"""OpenAI-compatible chat completion provider.

Talks to ``{base_url}/chat/completions`` directly over HTTP, so any
OpenAI-compatible gateway works by changing ``OPEN_API_URL``.
"""

import logging

import httpx

from digitization_finder.config import settings
from digitization_finder.errors import ConfigurationError, ReportGenerationError

logger = logging.getLogger(__name__)


class OpenAIReportProvider:
    """OpenAI implementation of the ReportGenerator protocol.

    This class satisfies the ReportGenerator protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = OpenAIReportProvider.create()
        text = await provider.complete(
            [{"role": "user", "content": "Say hello"}],
            max_tokens=20,
        )
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model_name: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the OpenAI provider.

        Args:
            api_key: API key. Defaults to settings.openai_api_key.
            base_url: API base URL. Defaults to settings.openai_api_url.
            model_name: Chat model. Defaults to settings.ai_model.
            client: HTTP client to use. If None, one is created lazily.
            timeout: Request timeout in seconds.
        """
        self._api_key = api_key or settings.openai_api_key
        self._base_url = (base_url or settings.openai_api_url).rstrip("/")
        self._model_name = model_name or settings.ai_model
        self._client = client
        self._timeout = timeout

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "OpenAIReportProvider":
        """Factory method to create OpenAIReportProvider with defaults."""
        return cls(model_name=model_name, client=client)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        """Generate a chat completion.

        Raises:
            ConfigurationError: If no API key is configured
            ReportGenerationError: If the API fails or returns no content
        """
        if not self._api_key:
            raise ConfigurationError("OpenAI API key is not configured")

        payload = {
            "model": self._model_name,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            response = await self.client.post(
                f"{self._base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise ReportGenerationError(f"OpenAI API error: {e}") from e

        if not response.is_success:
            logger.error("OpenAI API error (%d): %s", response.status_code, response.text[:500])
            raise ReportGenerationError(
                f"OpenAI API error: {response.status_code} {response.reason_phrase}"
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ReportGenerationError(f"Unexpected OpenAI response format: {e}") from e

        if not content:
            raise ReportGenerationError("No report content generated")
        return content

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
