"""
Search orchestrator - resolves a query through the Column Match, Spatial Match
and Text Fallback tiers, first success wins.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from rental_search.error_handling import UpstreamError
from rental_search.filtering import ListingFilter
from rental_search.models import ListingSummary, ResolutionTier, SearchRequest
from rental_search.services.geocoding import GeocodeStatus, GeocodingClient
from .executors import ColumnMatchExecutor, SpatialQueryExecutor, TextFallbackExecutor
from .query_normalizer import normalize_location_term, trim_punctuation


logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    """Result set plus the tier that produced it"""
    listings: List[ListingSummary]
    tier: ResolutionTier
    geocode_status: Optional[GeocodeStatus] = None


class SearchOrchestrator:
    """Orchestrate the tiered search resolution"""

    def __init__(
        self,
        column_executor: ColumnMatchExecutor,
        spatial_executor: SpatialQueryExecutor,
        text_executor: TextFallbackExecutor,
        geocoder: GeocodingClient,
        radius_km: float = 20.0,
        listing_filter: Optional[ListingFilter] = None
    ):
        self.column_executor = column_executor
        self.spatial_executor = spatial_executor
        self.text_executor = text_executor
        self.geocoder = geocoder
        self.radius_km = radius_km
        self.listing_filter = listing_filter or ListingFilter()

    async def resolve(self, request: SearchRequest) -> SearchOutcome:
        """
        Resolve a search request.

        1. No query: structured filters + sort over all available listings.
        2. Column Match on state/city/locality; any hit is final.
        3. Geocode, then radius search; a resolved place is final even when
           nothing lies within the radius.
        4. Text Fallback on title/description with all structured filters.

        Args:
            request: Validated search request

        Returns:
            SearchOutcome with the listings and the tier that produced them

        Raises:
            UpstreamError: If a store call on a non-recoverable tier fails
        """
        if not request.query:
            listings = await self.text_executor.execute(request)
            logger.info(f"Browse returned {len(listings)} listings")
            return SearchOutcome(listings, ResolutionTier.BROWSE)

        location_term = normalize_location_term(request.query)
        geocode_status = None

        if location_term:
            matches = await self.column_executor.execute(location_term)
            if matches:
                filtered = self._apply_price_filter(matches, request)
                logger.info(
                    f"Column match for '{location_term}': {len(matches)} rows, "
                    f"{len(filtered)} after price filter"
                )
                return SearchOutcome(filtered, ResolutionTier.COLUMN_MATCH)

            geocode = await self.geocoder.geocode(location_term)
            geocode_status = geocode.status

            if geocode.status == GeocodeStatus.RESOLVED:
                try:
                    nearby = await self.spatial_executor.execute(geocode.candidate, self.radius_km)
                except UpstreamError as e:
                    logger.warning(
                        f"Spatial match unavailable for '{location_term}', "
                        f"falling back to text search: {e}"
                    )
                else:
                    filtered = self._apply_price_filter(nearby, request)
                    logger.info(
                        f"Spatial match for '{location_term}' within {self.radius_km}km: "
                        f"{len(filtered)} listings"
                    )
                    return SearchOutcome(filtered, ResolutionTier.SPATIAL_MATCH, geocode_status)
            else:
                logger.info(
                    f"Geocoding {geocode.status.value} for '{location_term}', "
                    f"falling back to text search"
                )

        text = trim_punctuation(request.query)
        listings = await self.text_executor.execute(request, text)
        logger.info(f"Text fallback for '{text}': {len(listings)} listings")
        return SearchOutcome(listings, ResolutionTier.TEXT_FALLBACK, geocode_status)

    def _apply_price_filter(
        self,
        listings: List[ListingSummary],
        request: SearchRequest
    ) -> List[ListingSummary]:
        return self.listing_filter.filter_by_price(
            listings,
            min_price=request.min_price,
            max_price=request.max_price
        )
