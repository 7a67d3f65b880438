from typing import Optional

from common.core.config import settings
from common.core.constants import CacheProviderType
from common.core.otel_axiom_exporter import get_logger

from .interface import CacheInterface
from .memory_cache import MemoryCache
from .redis_cache import RedisCache

logger = get_logger(__name__)

_PROVIDERS: dict[CacheProviderType, type[CacheInterface]] = {
    CacheProviderType.REDIS: RedisCache,
    CacheProviderType.MEMORY: MemoryCache,
}

_cache_provider: Optional[CacheInterface] = None


def get_cache_provider() -> CacheInterface:
    """Process-wide cache, built on first use from ``settings.cache_provider``."""
    global _cache_provider
    if _cache_provider is None:
        _cache_provider = _PROVIDERS[settings.cache_provider]()
        logger.info(f"Using {settings.cache_provider.value} cache provider")
    return _cache_provider


async def close_cache_provider() -> None:
    """Close and forget the process-wide cache, if one was built."""
    global _cache_provider
    if _cache_provider is not None:
        await _cache_provider.close()
        _cache_provider = None
