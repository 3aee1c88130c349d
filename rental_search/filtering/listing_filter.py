"""
Listing filter implementation for resolved search results.

This module provides the in-memory numeric price filter applied to result sets
that bypass the store-level price predicate, and locality aggregation for the
nearby-areas view.
"""

from collections import Counter
from typing import Dict, List, Optional, Tuple

from rental_search.models import AreaSummary, ListingSummary


class ListingFilter:
    """Filters and aggregates listings already fetched from the store.

    Column Match and Spatial Match results skip the store's price predicate,
    so the same bounds are re-applied here against each listing's minimum
    variant price.
    """

    def filter_by_price(
        self,
        listings: List[ListingSummary],
        min_price: Optional[float] = None,
        max_price: Optional[float] = None
    ) -> List[ListingSummary]:
        """Filter listings by price range.

        Keeps a listing iff ``min_price <= price`` (when given) and
        ``price <= max_price`` (when given), where price is the listing's
        minimum variant price with non-numeric amounts counted as zero.
        Input order is preserved.

        Args:
            listings: List of listings to filter
            min_price: Minimum price (inclusive), None for no minimum
            max_price: Maximum price (inclusive), None for no maximum

        Returns:
            List of listings that meet the price criteria
        """
        if min_price is None and max_price is None:
            return list(listings)

        filtered = []

        for listing in listings:
            price_value = listing.min_price_value()

            if min_price is not None and price_value < min_price:
                continue

            if max_price is not None and price_value > max_price:
                continue

            filtered.append(listing)

        return filtered

    def aggregate_areas(
        self,
        listings: List[ListingSummary],
        limit: int = 10
    ) -> List[AreaSummary]:
        """Count listings per (locality, city).

        Listings without a locality are skipped. Areas are ordered by count
        descending, ties by first appearance (the store returns nearest first).

        Args:
            listings: Listings to aggregate
            limit: Maximum number of areas to return

        Returns:
            Up to ``limit`` area aggregates
        """
        counts: Counter = Counter()
        first_seen: Dict[Tuple[str, Optional[str]], int] = {}

        for index, listing in enumerate(listings):
            if not listing.locality or not listing.locality.strip():
                continue
            key = (listing.locality.strip(), listing.city)
            counts[key] += 1
            first_seen.setdefault(key, index)

        ranked = sorted(counts.items(), key=lambda item: (-item[1], first_seen[item[0]]))

        return [
            AreaSummary(name=name, city=city, count=count)
            for (name, city), count in ranked[:limit]
        ]
