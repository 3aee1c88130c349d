"""
Search service - the long-lived owner of the rate limiter, listing cache and
resolution pipeline. One instance per application; tests build their own.
"""

import json
import logging
from typing import List, Optional

from rental_search.caching import ListingCache
from rental_search.config import AppSettings
from rental_search.filtering import ListingFilter
from rental_search.models import AreaSummary, ListingSummary, LocationCandidate, SearchRequest
from rental_search.rate_limiting import EndpointClass, RateLimiter, RateRecord
from rental_search.services.geocoding import GeocodingClient
from .executors import ColumnMatchExecutor, SpatialQueryExecutor, TextFallbackExecutor
from .listing_store import ListingStore
from .search_orchestrator import SearchOrchestrator, SearchOutcome


logger = logging.getLogger(__name__)


def serialize_listings(listings: List[ListingSummary]) -> str:
    """Serialize listings to the JSON array returned by the API."""
    return json.dumps([listing.to_projection() for listing in listings], default=str)


class SearchService:
    """Entry point for every search operation the API exposes"""

    def __init__(
        self,
        store: ListingStore,
        geocoder: GeocodingClient,
        settings: Optional[AppSettings] = None,
        rate_limiter: Optional[RateLimiter] = None,
        cache: Optional[ListingCache] = None
    ):
        self.settings = settings or AppSettings()
        self.store = store
        self.geocoder = geocoder
        self.rate_limiter = rate_limiter or RateLimiter(self.settings.rate_limiting)
        self.cache = cache or ListingCache(ttl_seconds=self.settings.cache.listing_ttl_seconds)
        self.listing_filter = ListingFilter()

        self.spatial_executor = SpatialQueryExecutor(store)
        self.text_executor = TextFallbackExecutor(store)
        self.orchestrator = SearchOrchestrator(
            column_executor=ColumnMatchExecutor(store),
            spatial_executor=self.spatial_executor,
            text_executor=self.text_executor,
            geocoder=geocoder,
            radius_km=self.settings.search.radius_km,
            listing_filter=self.listing_filter,
        )

    @property
    def available_cache_key(self) -> str:
        return f"products:available:{self.settings.search.fallback_list_limit}"

    def check_rate(self, identity: str, endpoint_class: EndpointClass = EndpointClass.GENERAL) -> RateRecord:
        """Count a request against the caller's allowance; raises RateLimitExceeded."""
        return self.rate_limiter.check(identity, endpoint_class)

    async def search(self, request: SearchRequest) -> SearchOutcome:
        """Run the tiered resolution for a validated request."""
        return await self.orchestrator.resolve(request)

    async def available_listings_payload(self) -> str:
        """
        JSON payload of the newest available listings.

        Served from the listing cache when fresh; otherwise fetched from the
        store and cached for the configured TTL.
        """
        key = self.available_cache_key
        cached = await self.cache.get(key)
        if cached is not None:
            logger.info(f"Cache hit for {key}")
            return cached

        listings = await self.text_executor.fetch_available(
            self.settings.search.fallback_list_limit
        )
        payload = serialize_listings(listings)
        await self.cache.set(key, payload)
        logger.info(f"Cached {len(listings)} available listings under {key}")
        return payload

    async def nearby_listings(
        self,
        latitude: float,
        longitude: float,
        radius_km: Optional[float] = None
    ) -> List[ListingSummary]:
        """Available listings around a point; store failures are fatal here."""
        center = LocationCandidate(latitude=latitude, longitude=longitude)
        return await self.spatial_executor.execute(
            center,
            radius_km or self.settings.search.radius_km
        )

    async def popular_areas(
        self,
        latitude: float,
        longitude: float,
        radius_km: Optional[float] = None
    ) -> List[AreaSummary]:
        """Localities around a point ranked by listing count."""
        listings = await self.nearby_listings(latitude, longitude, radius_km)
        return self.listing_filter.aggregate_areas(
            listings,
            limit=self.settings.search.areas_limit
        )

    async def close(self):
        await self.geocoder.close()
