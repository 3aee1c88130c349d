"""Configuration module for the rental search engine."""

from .search_config import (
    SEARCH_CONFIG,
    AppSettings,
    RateLimitConfig,
    CacheConfig,
    GeocodingConfig,
    SearchConfig,
    DatabaseConfig,
    get_search_settings,
)

__all__ = [
    'SEARCH_CONFIG',
    'AppSettings',
    'RateLimitConfig',
    'CacheConfig',
    'GeocodingConfig',
    'SearchConfig',
    'DatabaseConfig',
    'get_search_settings',
]
