"""
Resolution tier executors.

Each executor issues exactly one store call and converts any store failure
into an UpstreamError naming the tier.
"""

import logging
from typing import List, Optional

from rental_search.error_handling import UpstreamError
from rental_search.models import LocationCandidate, ListingSummary, SearchRequest
from .listing_store import ListingQuery, ListingStore


logger = logging.getLogger(__name__)


class ColumnMatchExecutor:
    """Substring lookup against state/city/locality columns"""

    def __init__(self, store: ListingStore):
        self.store = store

    async def execute(self, term: str) -> List[ListingSummary]:
        try:
            return await self.store.match_location(term)
        except Exception as e:
            logger.error(f"Column match failed for '{term}': {e}")
            raise UpstreamError("Listing lookup failed", operation="column_match") from e


class SpatialQueryExecutor:
    """Radius-bounded nearest-listings lookup"""

    def __init__(self, store: ListingStore):
        self.store = store

    async def execute(self, center: LocationCandidate, radius_km: float) -> List[ListingSummary]:
        try:
            return await self.store.fetch_nearby(
                center.latitude,
                center.longitude,
                radius_km * 1000
            )
        except Exception as e:
            logger.error(
                f"Spatial query failed around ({center.latitude}, {center.longitude}): {e}"
            )
            raise UpstreamError("Nearby listing lookup failed", operation="spatial_match") from e


class TextFallbackExecutor:
    """Structured filter + sort path, optionally with a title/description match"""

    def __init__(self, store: ListingStore):
        self.store = store

    async def execute(self, request: SearchRequest, text: Optional[str] = None) -> List[ListingSummary]:
        """
        Search available listings with every structured filter applied
        at the store.

        Args:
            request: Validated search request
            text: Punctuation-trimmed query, or None to browse without text

        Returns:
            Listings ordered per the request's sort key, at most ``limit``
        """
        query = ListingQuery(
            text=text or None,
            location=request.location,
            min_price=request.min_price,
            max_price=request.max_price,
            property_type=request.property_type.value if request.property_type else None,
            amenities=request.amenities,
            sort_key=request.sort_key,
            reverse=request.reverse,
            limit=request.limit,
        )
        try:
            return await self.store.search(query)
        except Exception as e:
            logger.error(f"Listing search failed: {e}")
            raise UpstreamError("Listing search failed", operation="text_fallback") from e

    async def fetch_available(self, limit: int) -> List[ListingSummary]:
        """Newest available listings for the unparameterized list endpoint."""
        try:
            return await self.store.fetch_available(limit)
        except Exception as e:
            logger.error(f"Available listing fetch failed: {e}")
            raise UpstreamError("Listing fetch failed", operation="fetch_available") from e
