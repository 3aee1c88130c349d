"""Data models for the rental search engine"""

from .listing import AreaSummary, ListingSummary, coerce_price
from .search import (
    LocationCandidate,
    PropertyType,
    ResolutionTier,
    SearchRequest,
    SortKey,
)

__all__ = [
    "AreaSummary",
    "ListingSummary",
    "coerce_price",
    "LocationCandidate",
    "PropertyType",
    "ResolutionTier",
    "SearchRequest",
    "SortKey",
]
