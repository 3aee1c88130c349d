"""Search services"""

from .executors import ColumnMatchExecutor, SpatialQueryExecutor, TextFallbackExecutor
from .listing_store import ListingQuery, ListingStore, build_search_sql, order_clause
from .search_orchestrator import SearchOrchestrator, SearchOutcome
from .search_service import SearchService, serialize_listings

__all__ = [
    "ColumnMatchExecutor",
    "SpatialQueryExecutor",
    "TextFallbackExecutor",
    "ListingQuery",
    "ListingStore",
    "build_search_sql",
    "order_clause",
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchService",
    "serialize_listings",
]
