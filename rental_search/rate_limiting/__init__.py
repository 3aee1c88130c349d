"""Rate limiting module for the rental search API."""

from .identity import UNKNOWN_IDENTITY, is_valid_ip, resolve_identity
from .rate_limiter import EndpointClass, RateLimiter, RateRecord

__all__ = [
    'UNKNOWN_IDENTITY',
    'is_valid_ip',
    'resolve_identity',
    'EndpointClass',
    'RateLimiter',
    'RateRecord',
]
