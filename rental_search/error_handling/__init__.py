"""
Error handling module for the rental search engine.

Provides the error taxonomy and its HTTP mapping.
"""

from .errors import (
    SearchError,
    ValidationError,
    RateLimitExceeded,
    UpstreamError,
    GeocodingUnavailable,
)
from .error_handler import error_payload, register_exception_handlers

__all__ = [
    'SearchError',
    'ValidationError',
    'RateLimitExceeded',
    'UpstreamError',
    'GeocodingUnavailable',
    'error_payload',
    'register_exception_handlers',
]
