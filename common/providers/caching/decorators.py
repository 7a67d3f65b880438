import functools
from typing import Callable, Optional, Type
from pydantic import BaseModel

from common.core.otel_axiom_exporter import get_logger
from .factory import get_cache_provider

logger = get_logger(__name__)


def cache(model_type: Type[BaseModel], ttl: int, key_generator: Callable[..., str]):
    """
    Read-through cache for async repository/service methods returning a pydantic model.

    Args:
        model_type: Pydantic model used to rebuild cached values
        ttl: Time to live in seconds
        key_generator: Builds the key from the call arguments (``self`` excluded)

    ``None`` results are not cached. Cache errors are logged and the wrapped
    function runs as if the cache did not exist.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            cache_key: Optional[str] = None
            try:
                # Instance method - skip self and pass only actual function args
                cache_key = key_generator(*args[1:], **kwargs)
                cached_value = await get_cache_provider().get(cache_key)
                if cached_value is not None:
                    logger.debug(f"Cache hit for key: {cache_key}")
                    return model_type.model_validate(cached_value)
            except Exception as e:
                logger.warning(f"Cache lookup failed for {func.__name__}: {e}")

            result = await func(*args, **kwargs)

            if cache_key and result is not None:
                try:
                    await get_cache_provider().set(
                        cache_key, result.model_dump(mode="json"), ttl
                    )
                except Exception as e:
                    logger.warning(f"Cache set failed for key {cache_key}: {e}")

            return result

        return wrapper

    return decorator


async def invalidate(key: str) -> None:
    """Drop one cache key, best effort."""
    try:
        await get_cache_provider().delete(key)
    except Exception as e:
        logger.warning(f"Cache invalidation failed for key {key}: {e}")
