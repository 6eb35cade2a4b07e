"""Error taxonomy shared by repositories, services and handlers.

Handlers translate these into HTTP status codes; services and repositories
only raise them. An empty search result is not an error.
"""


class FinderError(Exception):
    """Base class for all application errors."""


class ConfigurationError(FinderError):
    """A required URL or credential is not configured."""


class UpstreamError(FinderError):
    """An external service could not be used."""


class UpstreamChallengeError(UpstreamError):
    """The access gateway kept answering with a challenge page.

    Raised only after every attempt, including the fallback-credential path,
    has been exhausted.
    """


class UpstreamFailureError(UpstreamError):
    """An upstream call kept failing (non-2xx status or transport error)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseFailureError(UpstreamError):
    """A successful response did not carry the expected JSON envelope."""


class AggregateFetchError(FinderError):
    """One of the analytic sub-queries failed, so no aggregate was produced."""

    def __init__(self, client: str, query_name: str, cause: Exception) -> None:
        super().__init__(f"Failed to fetch {query_name} for client '{client}': {cause}")
        self.client = client
        self.query_name = query_name
        self.cause = cause


class ReportGenerationError(FinderError):
    """The language model call failed or returned no content."""
