import json
from typing import Any, Optional
import redis.asyncio as redis
from redis.exceptions import RedisError

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger, trace_span
from .interface import CacheInterface

logger = get_logger(__name__)


class RedisCache(CacheInterface):
    """
    Redis-backed cache shared between API replicas.

    Keys are namespaced with ``settings.cache_key_prefix``. The client is
    created on first use; every Redis failure degrades to a miss.
    """

    def __init__(self, client: Optional[redis.Redis] = None, prefix: Optional[str] = None):
        self._client = client
        self.prefix = settings.cache_key_prefix if prefix is None else prefix

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                password=settings.redis_password,
                db=settings.redis_db,
                decode_responses=True,
            )
            logger.info(
                f"Redis cache client created for {settings.redis_host}:{settings.redis_port}/{settings.redis_db}"
            )
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @trace_span
    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self.client.get(self._key(key))
        except RedisError as e:
            logger.error(f"Redis get failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Discarding undecodable cache entry {key}: {e}")
            await self.delete(key)
            return None

    @trace_span
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            payload = json.dumps(value, default=str)
            return bool(await self.client.set(self._key(key), payload, ex=ttl or None))
        except (RedisError, TypeError) as e:
            logger.error(f"Redis set failed for {key}: {e}")
            return False

    @trace_span
    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.client.delete(self._key(key)))
        except RedisError as e:
            logger.error(f"Redis delete failed for {key}: {e}")
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis cache client closed")
