import pytest
from unittest.mock import patch

from common.providers.caching.memory_cache import MemoryCache


class TestMemoryCache:
    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        cache = MemoryCache()

        assert await cache.set("plan:1", {"plan": "free"})
        assert await cache.get("plan:1") == {"plan": "free"}
        assert await cache.delete("plan:1")
        assert await cache.get("plan:1") is None
        assert not await cache.delete("plan:1")

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self):
        cache = MemoryCache()

        with patch("common.providers.caching.memory_cache.time.monotonic", return_value=100.0):
            await cache.set("plan:1", {"plan": "free"}, ttl=30)
        with patch("common.providers.caching.memory_cache.time.monotonic", return_value=129.0):
            assert await cache.get("plan:1") == {"plan": "free"}
        with patch("common.providers.caching.memory_cache.time.monotonic", return_value=130.0):
            assert await cache.get("plan:1") is None

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_least_recently_used_key_is_evicted(self):
        cache = MemoryCache(max_entries=2)
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.get("a")

        await cache.set("c", 3)

        assert await cache.get("a") == 1
        assert await cache.get("b") is None
        assert await cache.get("c") == 3

    @pytest.mark.asyncio
    async def test_close_empties_cache(self):
        cache = MemoryCache()
        await cache.set("a", 1)

        await cache.close()

        assert len(cache) == 0
