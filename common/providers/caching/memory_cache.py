import time
from collections import OrderedDict
from typing import Any, NamedTuple, Optional

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger
from .interface import CacheInterface

logger = get_logger(__name__)


class _Slot(NamedTuple):
    value: Any
    expires_at: Optional[float]


class MemoryCache(CacheInterface):
    """
    Process-local LRU cache with per-key expiry.

    Used in tests and single-process local runs. Once ``max_entries`` is
    reached the least recently used key is evicted.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries or settings.memory_cache_max_entries
        self._slots: "OrderedDict[str, _Slot]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._slots)

    async def get(self, key: str) -> Optional[Any]:
        slot = self._slots.get(key)
        if slot is None:
            return None
        if slot.expires_at is not None and time.monotonic() >= slot.expires_at:
            del self._slots[key]
            return None
        self._slots.move_to_end(key)
        return slot.value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        self._slots[key] = _Slot(value, time.monotonic() + ttl if ttl else None)
        self._slots.move_to_end(key)
        while len(self._slots) > self.max_entries:
            evicted, _ = self._slots.popitem(last=False)
            logger.debug(f"Evicted cache key {evicted}")
        return True

    async def delete(self, key: str) -> bool:
        return self._slots.pop(key, None) is not None

    async def close(self) -> None:
        self._slots.clear()
