"""Caching module for hot listing read paths."""

from .ephemeral_cache import CacheEntry, EphemeralCache
from .listing_cache import ListingCache

__all__ = ['CacheEntry', 'EphemeralCache', 'ListingCache']
