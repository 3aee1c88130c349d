"""
Tests for tiered search resolution.
"""

import asyncio

import pytest
from hypothesis import given, settings, strategies as st

from rental_search.error_handling import UpstreamError
from rental_search.models import LocationCandidate, PropertyType, ResolutionTier, SearchRequest, SortKey
from rental_search.services.geocoding import GeocodeResult, GeocodeStatus
from rental_search.services.search import (
    ColumnMatchExecutor,
    SearchOrchestrator,
    SpatialQueryExecutor,
    TextFallbackExecutor,
)
from rental_search.validation import parse_search_request
from tests.fakes import FakeGeocoder, FakeListingStore, make_listing


MANDSAUR_CENTER = LocationCandidate(latitude=24.07, longitude=75.07, display_name="Mandsaur")


def build_orchestrator(store, geocoder, radius_km=20.0):
    return SearchOrchestrator(
        column_executor=ColumnMatchExecutor(store),
        spatial_executor=SpatialQueryExecutor(store),
        text_executor=TextFallbackExecutor(store),
        geocoder=geocoder,
        radius_km=radius_km,
    )


@pytest.fixture
def catalogue():
    return [
        make_listing("1", title="PG for girls", price=5000, city="Mandsaur", locality="Gandhi Nagar",
                     state="Madhya Pradesh", tags=["PG"], age_days=1),
        make_listing("2", title="2BHK flat", price=12000, city="Mandsaur", locality="Station Road",
                     state="Madhya Pradesh", tags=["2BHK"], age_days=2),
        make_listing("3", title="Room near college", price=8000, city="Indore", locality="Vijay Nagar",
                     state="Madhya Pradesh", tags=["Room"], amenities=["WiFi"], age_days=3),
        make_listing("4", title="Hostel bed", price=3000, city="Bhopal", state="Madhya Pradesh",
                     tags=["Hostel"], age_days=4),
        make_listing("5", title="Sold flat", price=9000, city="Mandsaur", available=False),
    ]


@pytest.mark.asyncio
async def test_column_match_short_circuits_geocoding(catalogue):
    store = FakeListingStore(catalogue)
    geocoder = FakeGeocoder(GeocodeResult.failed("provider down"))
    orchestrator = build_orchestrator(store, geocoder)

    outcome = await orchestrator.resolve(SearchRequest(query="Mandsaur"))

    assert outcome.tier == ResolutionTier.COLUMN_MATCH
    assert [l.id for l in outcome.listings] == ["1", "2"]
    assert geocoder.calls == []
    assert store.call_count("search") == 0


@pytest.mark.asyncio
async def test_column_match_applies_price_filter(catalogue):
    store = FakeListingStore(catalogue)
    orchestrator = build_orchestrator(store, FakeGeocoder())

    outcome = await orchestrator.resolve(
        SearchRequest(query="Madhya Pradesh", min_price=6000, max_price=20000)
    )

    assert outcome.tier == ResolutionTier.COLUMN_MATCH
    assert [l.id for l in outcome.listings] == ["2", "3"]


@pytest.mark.asyncio
async def test_column_match_with_nothing_in_range_returns_empty(catalogue):
    store = FakeListingStore(catalogue)
    geocoder = FakeGeocoder(GeocodeResult.resolved(MANDSAUR_CENTER))
    orchestrator = build_orchestrator(store, geocoder)

    outcome = await orchestrator.resolve(SearchRequest(query="Mandsaur", min_price=50000))

    assert outcome.tier == ResolutionTier.COLUMN_MATCH
    assert outcome.listings == []
    assert geocoder.calls == []


@pytest.mark.asyncio
async def test_query_punctuation_is_normalized_for_column_match(catalogue):
    store = FakeListingStore(catalogue)
    orchestrator = build_orchestrator(store, FakeGeocoder())

    outcome = await orchestrator.resolve(SearchRequest(query="  Indore,  "))

    assert outcome.tier == ResolutionTier.COLUMN_MATCH
    assert store.calls[0] == ("match_location", "Indore")


@pytest.mark.asyncio
async def test_resolved_place_uses_spatial_match(catalogue):
    nearby = [
        make_listing("n1", price=4000, locality="Nai Abadi", city="Neemuch"),
        make_listing("n2", price=15000, locality="Nai Abadi", city="Neemuch"),
    ]
    store = FakeListingStore(catalogue, nearby=nearby)
    geocoder = FakeGeocoder(GeocodeResult.resolved(MANDSAUR_CENTER))
    orchestrator = build_orchestrator(store, geocoder, radius_km=20)

    outcome = await orchestrator.resolve(SearchRequest(query="Neemuch", max_price=10000))

    assert outcome.tier == ResolutionTier.SPATIAL_MATCH
    assert outcome.geocode_status == GeocodeStatus.RESOLVED
    assert [l.id for l in outcome.listings] == ["n1"]
    assert geocoder.calls == ["Neemuch"]
    assert ("fetch_nearby", 24.07, 75.07, 20000) in store.calls


@pytest.mark.asyncio
async def test_resolved_place_with_nothing_nearby_is_final(catalogue):
    store = FakeListingStore(catalogue, nearby=[])
    geocoder = FakeGeocoder(GeocodeResult.resolved(MANDSAUR_CENTER))
    orchestrator = build_orchestrator(store, geocoder)

    outcome = await orchestrator.resolve(SearchRequest(query="Hostel bed somewhere remote"))

    assert outcome.tier == ResolutionTier.SPATIAL_MATCH
    assert outcome.listings == []
    assert store.call_count("search") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("geocode", [GeocodeResult.no_match(), GeocodeResult.failed("timeout")])
async def test_unresolved_place_falls_back_to_text(catalogue, geocode):
    store = FakeListingStore(catalogue)
    orchestrator = build_orchestrator(store, FakeGeocoder(geocode))

    outcome = await orchestrator.resolve(SearchRequest(query="college!"))

    assert outcome.tier == ResolutionTier.TEXT_FALLBACK
    assert outcome.geocode_status == geocode.status
    assert [l.id for l in outcome.listings] == ["3"]
    assert store.calls[-1][1].text == "college"


@pytest.mark.asyncio
async def test_quoted_query_matches_in_text_fallback(catalogue):
    store = FakeListingStore(catalogue)
    orchestrator = build_orchestrator(store, FakeGeocoder(GeocodeResult.no_match()))
    request = parse_search_request({"query": '"college"'})

    outcome = await orchestrator.resolve(request)

    assert request.query == "&quot;college&quot;"
    assert outcome.tier == ResolutionTier.TEXT_FALLBACK
    assert store.calls[-1][1].text == "college"
    assert [l.id for l in outcome.listings] == ["3"]


@pytest.mark.asyncio
async def test_spatial_failure_falls_back_to_text(catalogue):
    store = FakeListingStore(catalogue, failing={"fetch_nearby"})
    geocoder = FakeGeocoder(GeocodeResult.resolved(MANDSAUR_CENTER))
    orchestrator = build_orchestrator(store, geocoder)

    outcome = await orchestrator.resolve(SearchRequest(query="flat"))

    assert outcome.tier == ResolutionTier.TEXT_FALLBACK
    assert [l.id for l in outcome.listings] == ["2"]


@pytest.mark.asyncio
async def test_column_store_failure_is_fatal(catalogue):
    store = FakeListingStore(catalogue, failing={"match_location"})
    geocoder = FakeGeocoder(GeocodeResult.resolved(MANDSAUR_CENTER))
    orchestrator = build_orchestrator(store, geocoder)

    with pytest.raises(UpstreamError) as exc_info:
        await orchestrator.resolve(SearchRequest(query="Mandsaur"))

    assert exc_info.value.operation == "column_match"
    assert geocoder.calls == []


@pytest.mark.asyncio
async def test_text_store_failure_is_fatal(catalogue):
    store = FakeListingStore(catalogue, failing={"search"})
    orchestrator = build_orchestrator(store, FakeGeocoder())

    with pytest.raises(UpstreamError) as exc_info:
        await orchestrator.resolve(SearchRequest(query="anything"))

    assert exc_info.value.operation == "text_fallback"


@pytest.mark.asyncio
async def test_text_fallback_applies_structured_filters(catalogue):
    store = FakeListingStore(catalogue)
    orchestrator = build_orchestrator(store, FakeGeocoder())

    outcome = await orchestrator.resolve(SearchRequest(
        query="room",
        property_type=PropertyType.ROOM,
        amenities=frozenset({"WiFi"}),
    ))

    assert [l.id for l in outcome.listings] == ["3"]
    query = store.calls[-1][1]
    assert query.property_type == "Room"
    assert query.amenities == frozenset({"WiFi"})


@pytest.mark.asyncio
async def test_no_query_browses_with_filters(catalogue):
    store = FakeListingStore(catalogue)
    geocoder = FakeGeocoder()
    orchestrator = build_orchestrator(store, geocoder)

    outcome = await orchestrator.resolve(SearchRequest(sort_key=SortKey.PRICE, limit=3))

    assert outcome.tier == ResolutionTier.BROWSE
    assert [l.id for l in outcome.listings] == ["4", "1", "3"]
    assert geocoder.calls == []
    assert store.call_count("match_location") == 0


@pytest.mark.asyncio
async def test_browse_reverse_price_sort(catalogue):
    orchestrator = build_orchestrator(FakeListingStore(catalogue), FakeGeocoder())

    outcome = await orchestrator.resolve(SearchRequest(sort_key=SortKey.PRICE, reverse=True))

    prices = [l.min_price_value() for l in outcome.listings]
    assert prices == sorted(prices, reverse=True)


@given(
    min_price=st.one_of(st.none(), st.integers(min_value=0, max_value=20000)),
    max_price=st.one_of(st.none(), st.integers(min_value=0, max_value=20000)),
)
@settings(max_examples=50)
def test_every_tier_respects_price_bounds(min_price, max_price):
    """
    For any price bounds, listings returned by any tier fall within them.
    """
    listings = [
        make_listing(str(i), title="flat", price=price, city="Mandsaur")
        for i, price in enumerate([1000, 5000, 9000, 13000, 17000])
    ]
    nearby = [make_listing(f"n{i}", price=p) for i, p in enumerate([2000, 11000, 19000])]
    requests = [
        SearchRequest(min_price=min_price, max_price=max_price),
        SearchRequest(query="Mandsaur", min_price=min_price, max_price=max_price),
        SearchRequest(query="Elsewhere", min_price=min_price, max_price=max_price),
    ]
    geocoders = [
        FakeGeocoder(),
        FakeGeocoder(),
        FakeGeocoder(GeocodeResult.resolved(MANDSAUR_CENTER)),
    ]

    for request, geocoder in zip(requests, geocoders):
        orchestrator = build_orchestrator(FakeListingStore(listings, nearby=nearby), geocoder)
        outcome = asyncio.run(orchestrator.resolve(request))
        for listing in outcome.listings:
            price = listing.min_price_value()
            assert min_price is None or price >= min_price
            assert max_price is None or price <= max_price
