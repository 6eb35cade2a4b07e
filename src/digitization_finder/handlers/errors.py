"""Translation of application errors into HTTP responses."""

from fastapi import HTTPException, status

from digitization_finder.errors import (
    AggregateFetchError,
    ConfigurationError,
    ReportGenerationError,
    UpstreamError,
)


def http_error(e: Exception, action: str) -> HTTPException:
    """Build the HTTPException for an error raised while doing ``action``.

    Args:
        e: The error raised by a service
        action: What was being attempted, e.g. "fetch client context"

    Returns:
        HTTPException with a status matching the error's category
    """
    if isinstance(e, AggregateFetchError) and isinstance(e.cause, ConfigurationError):
        e = e.cause

    if isinstance(e, ConfigurationError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        detail = f"Configuration error: {e}"
    elif isinstance(e, ReportGenerationError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
        detail = f"AI service error: {e}"
    elif isinstance(e, (UpstreamError, AggregateFetchError)):
        code = status.HTTP_502_BAD_GATEWAY
        detail = f"Failed to {action}: {e}"
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        detail = f"Failed to {action}: {e}"
    return HTTPException(status_code=code, detail=detail)
