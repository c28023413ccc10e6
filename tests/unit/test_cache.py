"""
Unit Tests - Response Cache
"""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from store_admin.serving import cache
from store_admin.serving.cache import CacheManager, invalidate


@pytest.fixture
def redis_client():
    """Mock Redis client installed as the active cache"""
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.setex = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=0)

    stored_keys = ["orders:stats", "orders:list"]

    async def scan_iter(match=None):
        for key in stored_keys:
            yield key

    client.scan_iter = scan_iter
    cache.set_redis(client)
    return client


class TestWithoutRedis:
    """Cache calls degrade to misses when no client is connected"""

    async def test_get_misses(self):
        assert await CacheManager("orders").get("stats") is None

    async def test_set_is_skipped(self):
        assert await CacheManager("orders").set("stats", {"total": 1}) is False

    async def test_invalidate_is_noop(self):
        assert await CacheManager("orders").invalidate_all() == 0

    def test_get_redis_raises(self):
        with pytest.raises(RuntimeError):
            cache.get_redis()


class TestCacheManager:
    """Tests for CacheManager against a mocked client"""

    async def test_get_decodes_json_under_namespace(self, redis_client):
        redis_client.get.return_value = json.dumps({"total": 4})

        value = await CacheManager("orders").get("stats")

        assert value == {"total": 4}
        redis_client.get.assert_awaited_once_with("orders:stats")

    async def test_set_uses_default_ttl(self, redis_client):
        stored = await CacheManager("analytics", default_ttl=300).set("chart:30", {"a": 1})

        assert stored is True
        redis_client.setex.assert_awaited_once_with("analytics:chart:30", 300, json.dumps({"a": 1}))

    async def test_read_failure_is_a_miss(self, redis_client):
        redis_client.get.side_effect = RedisConnectionError("down")

        assert await CacheManager("orders").get("stats") is None

    async def test_write_failure_returns_false(self, redis_client):
        redis_client.setex.side_effect = RedisConnectionError("down")

        assert await CacheManager("orders").set("stats", {"a": 1}) is False

    async def test_invalidate_all_deletes_namespace_keys(self, redis_client):
        redis_client.delete.return_value = 2

        deleted = await CacheManager("orders").invalidate_all()

        assert deleted == 2
        redis_client.delete.assert_awaited_once_with("orders:stats", "orders:list")

    async def test_invalidate_several_namespaces(self, redis_client):
        await invalidate(CacheManager("orders"), CacheManager("analytics"))

        assert redis_client.delete.await_count == 2

    async def test_get_or_set_computes_on_miss(self, redis_client):
        factory = AsyncMock(return_value=[1, 2, 3])

        value = await CacheManager("products").get_or_set("categories", factory)

        assert value == [1, 2, 3]
        factory.assert_awaited_once()
        redis_client.setex.assert_awaited_once()

    async def test_get_or_set_skips_factory_on_hit(self, redis_client):
        redis_client.get.return_value = json.dumps(["Smartwatches"])
        factory = AsyncMock()

        value = await CacheManager("products").get_or_set("categories", factory)

        assert value == ["Smartwatches"]
        factory.assert_not_awaited()
