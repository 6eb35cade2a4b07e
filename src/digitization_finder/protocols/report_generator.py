"""Report generator protocol.

Any chat-completion style language model can back report generation:
- OpenAI or an OpenAI-compatible gateway (default)
- A canned responder for tests
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ReportGenerator(Protocol):
    """Protocol for language model completion services."""

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        """Generate a completion for a chat transcript.

        Args:
            messages: Chat messages with ``role`` and ``content`` keys
            max_tokens: Upper bound on generated tokens
            temperature: Sampling temperature

        Returns:
            The generated text

        Raises:
            ReportGenerationError: If the model call fails or returns nothing
        """
        ...
