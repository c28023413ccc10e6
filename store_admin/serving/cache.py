"""
Redis Cache Module

Response cache for the admin API with:
- Connection pooling
- JSON serialization
- TTL per namespace
- Namespace invalidation after writes

Caching is best effort. When Redis is disabled, not yet connected, or
failing, reads miss and writes are skipped.
"""

import json
from typing import Any, Awaitable, Callable, Optional, Union
from datetime import timedelta

import structlog
from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from store_admin.config import get_settings

logger = structlog.get_logger(__name__)

_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None


async def init_redis() -> Optional[Redis]:
    """Initialize Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client is not None:
        return _redis_client

    settings = get_settings()
    if not settings.redis.enabled:
        logger.info("Redis caching disabled")
        return None

    _redis_pool = ConnectionPool.from_url(
        settings.redis.get_url(),
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
        decode_responses=settings.redis.decode_responses,
    )
    client = Redis(connection_pool=_redis_pool)

    try:
        await client.ping()
    except RedisError as e:
        logger.error("Redis connection failed", error=str(e))
        await _redis_pool.disconnect()
        _redis_pool = None
        raise

    _redis_client = client
    logger.info("Redis connection established")
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection pool"""
    global _redis_pool, _redis_client

    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None

    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None

    logger.info("Redis connection closed")


def get_redis() -> Redis:
    """Get Redis client instance"""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def set_redis(client: Optional[Redis]) -> None:
    """Install a client directly, or clear it with ``None``."""
    global _redis_client
    _redis_client = client


async def cache_get(key: str) -> Optional[Any]:
    """
    Get value from cache.

    Returns:
        Cached value, or None on a miss or when the cache is unavailable
    """
    if _redis_client is None:
        return None

    try:
        value = await _redis_client.get(key)
    except RedisError as e:
        logger.warning("Cache read failed", key=key, error=str(e))
        return None

    if value is None:
        return None

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


async def cache_set(
    key: str,
    value: Any,
    ttl: Optional[Union[int, timedelta]] = None,
) -> bool:
    """
    Set value in cache.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time-to-live in seconds or timedelta

    Returns:
        True if the value was stored
    """
    if _redis_client is None:
        return False

    try:
        serialized = json.dumps(value, default=str)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to serialize value for cache", key=key, error=str(e))
        return False

    if isinstance(ttl, timedelta):
        ttl = int(ttl.total_seconds())

    try:
        if ttl:
            await _redis_client.setex(key, ttl, serialized)
        else:
            await _redis_client.set(key, serialized)
    except RedisError as e:
        logger.warning("Cache write failed", key=key, error=str(e))
        return False

    return True


async def cache_delete_pattern(pattern: str) -> int:
    """Delete all keys matching pattern"""
    if _redis_client is None:
        return 0

    try:
        keys = [key async for key in _redis_client.scan_iter(match=pattern)]
        if not keys:
            return 0
        return await _redis_client.delete(*keys)
    except RedisError as e:
        logger.warning("Cache invalidation failed", pattern=pattern, error=str(e))
        return 0


class CacheManager:
    """
    Cache manager with namespace support.

    Example:
        cache = CacheManager("orders")
        await cache.set("stats", stats, ttl=300)
        stats = await cache.get("stats")
    """

    def __init__(self, namespace: str, default_ttl: int = 300):
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        return await cache_get(self._key(key))

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await cache_set(self._key(key), value, ttl or self.default_ttl)

    async def invalidate_all(self) -> int:
        """Invalidate all keys in namespace"""
        deleted = await cache_delete_pattern(f"{self.namespace}:*")
        logger.debug("Cache namespace invalidated", namespace=self.namespace, deleted=deleted)
        return deleted

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: Optional[int] = None,
    ) -> Any:
        """
        Get from cache or compute and cache.

        Args:
            key: Cache key
            factory: Async function computing a JSON-serializable value on a miss
            ttl: Time-to-live

        Returns:
            Cached or computed value
        """
        value = await self.get(key)
        if value is not None:
            return value

        value = await factory()
        await self.set(key, value, ttl)
        return value


async def invalidate(*caches: CacheManager) -> None:
    """Drop every namespace touched by a write."""
    for cache in caches:
        await cache.invalidate_all()


# Pre-configured cache managers
orders_cache = CacheManager("orders", default_ttl=120)
products_cache = CacheManager("products", default_ttl=600)
customers_cache = CacheManager("customers", default_ttl=600)
analytics_cache = CacheManager("analytics", default_ttl=300)
dashboard_cache = CacheManager("dashboard", default_ttl=120)
