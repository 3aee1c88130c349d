"""
Filtering module for resolved listings.

This module provides in-memory price filtering and locality aggregation of
listings returned by the resolution tiers.
"""

from .listing_filter import ListingFilter

__all__ = ['ListingFilter']
