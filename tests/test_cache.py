"""Tests for the short-lived read-through cache."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from custom_components.honeywell_evohome.infrastructure.cache import DEFAULT_CACHE_TTL, ShortTTLCache


class TestShortTTLCache:
    """Test ShortTTLCache class."""

    def test_default_ttl(self):
        """Test that the default TTL is 10 seconds."""
        assert DEFAULT_CACHE_TTL == 10.0
        assert ShortTTLCache().cache_ttl == 10.0

    @pytest.mark.asyncio
    async def test_hit_within_ttl_does_not_fetch(self):
        """Test that a live entry is returned without fetching."""
        cache = ShortTTLCache(cache_ttl=10.0)
        fetch = AsyncMock(return_value={"status": 1})

        with patch.object(cache, "_get_current_time", return_value=100.0):
            first = await cache.get_or_fetch("loc-1", fetch)
        with patch.object(cache, "_get_current_time", return_value=109.9):
            second = await cache.get_or_fetch("loc-1", fetch)

        assert first == second == {"status": 1}
        assert fetch.await_count == 1
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_expired_entry_is_refetched(self):
        """Test that an expired entry is treated as absent."""
        cache = ShortTTLCache(cache_ttl=10.0)
        fetch = AsyncMock(side_effect=[{"status": 1}, {"status": 2}])

        with patch.object(cache, "_get_current_time", return_value=100.0):
            await cache.get_or_fetch("loc-1", fetch)
        with patch.object(cache, "_get_current_time", return_value=110.0):
            result = await cache.get_or_fetch("loc-1", fetch)

        assert result == {"status": 2}
        assert fetch.await_count == 2
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_concurrent_misses_fetch_once(self):
        """Test that 10 concurrent readers of a missing key trigger one fetch."""
        cache = ShortTTLCache(cache_ttl=10.0)
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return {"status": calls}

        results = await asyncio.gather(*(cache.get_or_fetch("loc-1", fetch) for _ in range(10)))

        assert calls == 1
        assert all(result == {"status": 1} for result in results)
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_concurrent_misses_after_expiry_fetch_once(self):
        """Test that after expiry 10 concurrent readers trigger exactly one fetch."""
        cache = ShortTTLCache(cache_ttl=10.0)
        fetch = AsyncMock(side_effect=[{"status": 1}, {"status": 2}, {"status": 3}])

        with patch.object(cache, "_get_current_time", return_value=100.0):
            await cache.get_or_fetch("loc-1", fetch)
        with patch.object(cache, "_get_current_time", return_value=200.0):
            results = await asyncio.gather(*(cache.get_or_fetch("loc-1", fetch) for _ in range(10)))

        assert fetch.await_count == 2
        assert all(result == {"status": 2} for result in results)
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates_and_is_not_cached(self):
        """Test that a failing fetch rejects the caller and the next call retries."""
        cache = ShortTTLCache(cache_ttl=10.0)
        fetch = AsyncMock(side_effect=[RuntimeError("offline"), {"status": 1}])

        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("loc-1", fetch)
        assert cache.get("loc-1") is None

        assert await cache.get_or_fetch("loc-1", fetch) == {"status": 1}
        assert fetch.await_count == 2
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        """Test that entries are cached per key."""
        cache = ShortTTLCache(cache_ttl=10.0)
        fetch_1 = AsyncMock(return_value="one")
        fetch_2 = AsyncMock(return_value="two")

        assert await cache.get_or_fetch("loc-1", fetch_1) == "one"
        assert await cache.get_or_fetch("loc-2", fetch_2) == "two"
        assert await cache.get_or_fetch("loc-1", fetch_2) == "one"
        fetch_2.assert_awaited_once()
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_zero_ttl_disables_cache(self):
        """Test that a TTL of 0 fetches every time."""
        cache = ShortTTLCache(cache_ttl=0)
        fetch = AsyncMock(return_value="value")

        await cache.get_or_fetch("loc-1", fetch)
        await cache.get_or_fetch("loc-1", fetch)

        assert fetch.await_count == 2
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self):
        """Test that invalidated entries are fetched again."""
        cache = ShortTTLCache(cache_ttl=10.0)
        cache.set("loc-1", "a")
        cache.set("loc-2", "b")

        cache.invalidate("loc-1")
        assert cache.get("loc-1") is None
        assert cache.get("loc-2") == "b"

        cache.clear()
        assert cache.get("loc-2") is None

    @pytest.mark.asyncio
    async def test_cached_none_is_a_hit(self):
        """Test that an empty response is cached like any other value."""
        cache = ShortTTLCache(cache_ttl=10.0)
        fetch = AsyncMock(return_value=None)

        results = await asyncio.gather(*(cache.get_or_fetch("loc-1", fetch) for _ in range(10)))

        assert results == [None] * 10
        assert fetch.await_count == 1
        assert cache.contains("loc-1") is True
        assert await cache.get_or_fetch("loc-1", fetch) is None
        assert fetch.await_count == 1
        await cache.async_shutdown()

    @pytest.mark.asyncio
    async def test_contains_evicts_expired_entry(self):
        """Test that an expired entry is not reported as present."""
        cache = ShortTTLCache(cache_ttl=10.0)

        with patch.object(cache, "_get_current_time", return_value=100.0):
            cache.set("loc-1", None)
        with patch.object(cache, "_get_current_time", return_value=110.0):
            assert cache.contains("loc-1") is False
        assert "loc-1" not in cache._entries
