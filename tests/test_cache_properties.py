"""
Property-based tests for the ephemeral cache and the listing cache.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from hypothesis import given, settings, strategies as st
from redis.exceptions import ConnectionError as RedisConnectionError

from rental_search.caching import EphemeralCache, ListingCache
from tests.fakes import FakeClock


keys = st.text(min_size=1, max_size=30)
values = st.one_of(st.text(max_size=50), st.integers(), st.lists(st.integers(), max_size=5))
ttls = st.integers(min_value=1, max_value=3600)


@given(key=keys, value=values, ttl=ttls, elapsed=st.integers(min_value=0, max_value=7200))
@settings(max_examples=200)
def test_entry_served_only_before_expiry(key, value, ttl, elapsed):
    """
    For any TTL and elapsed time, a value is served iff elapsed < TTL, and an
    expired entry is evicted on read.
    """
    clock = FakeClock()
    cache = EphemeralCache(clock=clock)

    cache.set(key, value, ttl)
    clock.advance(elapsed)

    if elapsed < ttl:
        assert cache.get(key) == value
        assert len(cache) == 1
    else:
        assert cache.get(key) is None
        assert len(cache) == 0


@given(key=keys, first=values, second=values)
@settings(max_examples=100)
def test_set_overwrites_unconditionally(key, first, second):
    clock = FakeClock()
    cache = EphemeralCache(clock=clock)
    start = clock.now

    cache.set(key, first, 10)
    entry = cache.set(key, second, 100)
    clock.advance(50)

    assert cache.get(key) == second
    assert entry.expires_at == start + timedelta(seconds=100)


def test_miss_for_unknown_key():
    assert EphemeralCache().get("missing") is None


def test_delete_and_purge():
    clock = FakeClock()
    cache = EphemeralCache(clock=clock)

    cache.set("a", 1, 10)
    cache.set("b", 2, 100)
    cache.set("c", 3, 100)
    cache.delete("c")
    clock.advance(10)

    assert cache.purge_expired() == 1
    assert len(cache) == 1
    assert cache.get("b") == 2


@pytest.mark.asyncio
async def test_listing_cache_uses_local_store_without_redis():
    clock = FakeClock()
    cache = ListingCache(ttl_seconds=30, local=EphemeralCache(clock=clock))

    await cache.set("products:available:50", "[]")
    assert await cache.get("products:available:50") == "[]"

    clock.advance(30)
    assert await cache.get("products:available:50") is None


@pytest.mark.asyncio
async def test_listing_cache_prefers_redis():
    redis_client = AsyncMock()
    redis_client.get = AsyncMock(return_value="[1]")
    cache = ListingCache(ttl_seconds=30, redis_client=redis_client)

    await cache.set("key", "[1]")
    assert await cache.get("key") == "[1]"

    redis_client.setex.assert_awaited_once_with("key", 30, "[1]")
    assert len(cache.local) == 0


@pytest.mark.asyncio
async def test_listing_cache_degrades_to_local_when_redis_fails():
    redis_client = AsyncMock()
    redis_client.get = AsyncMock(side_effect=RedisConnectionError("down"))
    redis_client.setex = AsyncMock(side_effect=RedisConnectionError("down"))
    cache = ListingCache(ttl_seconds=30, redis_client=redis_client)

    await cache.set("key", "[2]")
    assert await cache.get("key") == "[2]"
    assert len(cache.local) == 1
