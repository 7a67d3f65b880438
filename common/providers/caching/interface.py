from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheInterface(ABC):
    """
    Key/value cache for JSON-serialisable values.

    Providers never raise on backend trouble: reads degrade to misses and
    writes report False, so callers can treat the cache as optional.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a value, optionally expiring after ``ttl`` seconds."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Drop a key. Returns False if it was not cached."""

    async def close(self) -> None:
        """Release backend connections. Safe to call more than once."""
