"""
Custom exceptions for the PDDikti directory client.

Provides structured error handling so callers can decide between
log-and-skip and abort for every institution they resolve.
"""


class PDDiktiError(Exception):
    """Base error for PDDikti client."""

    pass


class RetryableError(PDDiktiError):
    """Temporary transport errors (connect reset, DNS hiccup, 5xx)."""

    pass


class TimeoutExceeded(PDDiktiError):
    """Request did not complete within the configured timeout."""

    pass


class InstitutionNotFound(PDDiktiError):
    """Directory lookup returned no institution (``pt``) match."""

    pass


class DirectoryDecodeError(PDDiktiError):
    """Response body is not the JSON document we expect."""

    pass


def map_http_error(e: Exception) -> PDDiktiError:
    import httpx

    if isinstance(e, httpx.TimeoutException):
        return TimeoutExceeded(str(e))
    if isinstance(e, httpx.HTTPStatusError):
        if e.response.status_code == 404:
            return InstitutionNotFound(str(e))
        if e.response.status_code >= 500:
            return RetryableError(str(e))
        return PDDiktiError(str(e))
    if isinstance(e, httpx.TransportError):
        return RetryableError(str(e))
    return PDDiktiError(str(e))
