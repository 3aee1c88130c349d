"""
Listing store - asyncpg access to the properties table and the radius search
procedure.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, FrozenSet, List, Optional, Tuple

import asyncpg

from rental_search.models import ListingSummary, SortKey
from .query_normalizer import escape_like


LISTING_COLUMNS = (
    "id, handle, title, description, price_range, currency_code, featured_image, "
    "images, tags, amenities, available_for_sale, user_id, contact_number, "
    "state, city, locality, latitude, longitude, created_at"
)

# Minimum variant price as a number; non-numeric amounts count as zero
MIN_PRICE_SQL = (
    r"(CASE WHEN price_range->'minVariantPrice'->>'amount' ~ '^\s*[0-9]+(\.[0-9]+)?\s*$' "
    r"THEN trim(price_range->'minVariantPrice'->>'amount')::numeric ELSE 0 END)"
)


@dataclass(frozen=True)
class ListingQuery:
    """Structured filters for the store-level search path"""
    text: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    property_type: Optional[str] = None
    amenities: FrozenSet[str] = field(default_factory=frozenset)
    sort_key: SortKey = SortKey.RELEVANCE
    reverse: bool = False
    limit: int = 24


def order_clause(sort_key: SortKey, reverse: bool = False) -> str:
    """
    ORDER BY expression for the store-level path.

    PRICE sorts by minimum price ascending (descending when reversed).
    CREATED_AT sorts newest first (oldest first when reversed).
    RELEVANCE has no scoring and degrades to newest first.
    """
    if sort_key == SortKey.PRICE:
        direction = "DESC" if reverse else "ASC"
        return f"{MIN_PRICE_SQL} {direction}, created_at DESC NULLS LAST"
    if sort_key == SortKey.CREATED_AT and reverse:
        return "created_at ASC NULLS LAST"
    return "created_at DESC NULLS LAST"


def build_search_sql(query: ListingQuery) -> Tuple[str, List[Any]]:
    """
    Build the parameterized SQL for a structured listing search.

    Args:
        query: Structured filters

    Returns:
        Tuple of (sql, positional args)
    """
    conditions = ["available_for_sale = TRUE"]
    args: List[Any] = []

    def bind(value: Any) -> str:
        args.append(value)
        return f"${len(args)}"

    if query.text:
        pattern = bind(f"%{escape_like(query.text)}%")
        conditions.append(f"(title ILIKE {pattern} OR description ILIKE {pattern})")

    if query.location:
        pattern = bind(f"%{escape_like(query.location)}%")
        conditions.append(
            f"(state ILIKE {pattern} OR city ILIKE {pattern} OR locality ILIKE {pattern})"
        )

    if query.min_price is not None:
        conditions.append(f"{MIN_PRICE_SQL} >= {bind(Decimal(str(query.min_price)))}::numeric")

    if query.max_price is not None:
        conditions.append(f"{MIN_PRICE_SQL} <= {bind(Decimal(str(query.max_price)))}::numeric")

    if query.property_type:
        conditions.append(f"{bind(query.property_type)} = ANY(tags)")

    if query.amenities:
        conditions.append(
            f"{bind(sorted(query.amenities))}::text[] <@ "
            f"(COALESCE(tags, '{{}}'::text[]) || COALESCE(amenities, '{{}}'::text[]))"
        )

    sql = (
        f"SELECT {LISTING_COLUMNS} FROM properties "
        f"WHERE {' AND '.join(conditions)} "
        f"ORDER BY {order_clause(query.sort_key, query.reverse)} "
        f"LIMIT {bind(query.limit)}"
    )
    return sql, args


class ListingStore:
    """Read-only queries against the persistent listing store"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def fetch_available(self, limit: int) -> List[ListingSummary]:
        """Newest available listings, capped at ``limit``."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(f"""
                SELECT {LISTING_COLUMNS}
                FROM properties
                WHERE available_for_sale = TRUE
                ORDER BY created_at DESC NULLS LAST
                LIMIT $1
            """, limit)
        return [ListingSummary.from_row(row) for row in rows]

    async def match_location(self, term: str) -> List[ListingSummary]:
        """Available listings whose state, city or locality contains ``term``."""
        pattern = f"%{escape_like(term)}%"
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(f"""
                SELECT {LISTING_COLUMNS}
                FROM properties
                WHERE available_for_sale = TRUE
                  AND (state ILIKE $1 OR city ILIKE $1 OR locality ILIKE $1)
                ORDER BY created_at DESC NULLS LAST
            """, pattern)
        return [ListingSummary.from_row(row) for row in rows]

    async def fetch_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float
    ) -> List[ListingSummary]:
        """Available listings within ``radius_meters`` of a point, nearest first.

        Delegates to the ``nearby_properties(center_lat, center_lng,
        radius_meters)`` procedure, which returns property rows plus a
        ``distance_meters`` column.
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch("""
                SELECT *
                FROM nearby_properties($1, $2, $3)
                WHERE available_for_sale = TRUE
                ORDER BY distance_meters ASC
            """, latitude, longitude, radius_meters)
        return [ListingSummary.from_row(row) for row in rows]

    async def search(self, query: ListingQuery) -> List[ListingSummary]:
        """Structured search with store-level filtering, ordering and limit."""
        sql, args = build_search_sql(query)
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(sql, *args)
        return [ListingSummary.from_row(row) for row in rows]
