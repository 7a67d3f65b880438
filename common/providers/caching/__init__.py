from .interface import CacheInterface
from .decorators import cache, invalidate
from .factory import close_cache_provider, get_cache_provider
from .memory_cache import MemoryCache
from .redis_cache import RedisCache

__all__ = [
    "CacheInterface",
    "MemoryCache",
    "RedisCache",
    "cache",
    "close_cache_provider",
    "get_cache_provider",
    "invalidate",
]
