"""
Error taxonomy for the search engine.

Each class maps to a distinct, client-actionable response so callers can tell
bad input, throttling and upstream outages apart.
"""

from typing import Optional


class SearchError(Exception):
    """Base class for all search engine errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SearchError):
    """Inbound field failed its type/shape check."""

    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class RateLimitExceeded(SearchError):
    """Caller exceeded the request ceiling for an endpoint class."""

    status_code = 429
    error_code = "rate_limited"

    def __init__(self, identity: str, endpoint_class: str, retry_after_seconds: int):
        super().__init__("Security Alert: Too many requests. Please try again later.")
        self.identity = identity
        self.endpoint_class = endpoint_class
        self.retry_after_seconds = retry_after_seconds


class UpstreamError(SearchError):
    """Persistent store call failed."""

    status_code = 502
    error_code = "upstream_error"

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class GeocodingUnavailable(SearchError):
    """Geocoding provider errored.

    Internal only: the geocoding client converts it into a FAILED result, so it
    never reaches the HTTP error handlers.
    """

    error_code = "geocoding_unavailable"
