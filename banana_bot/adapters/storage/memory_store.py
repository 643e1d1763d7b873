"""In-process TTL store — implements DedupStorePort.

Suitable for a single worker process; multi-instance deployments should
use RedisDedupStore so every instance sees the same keys.
"""

import time
from typing import Callable, Dict, Optional, Tuple


class MemoryDedupStore:
    """Dict-backed key-value store with per-key expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_keys: int = 10000):
        self._clock = clock
        self._max_keys = max_keys
        self._data: Dict[str, Tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def _purge(self) -> None:
        now = self._clock()
        expired = [k for k, (_, exp) in self._data.items() if exp <= now]
        for k in expired:
            del self._data[k]

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl: int) -> None:
        if len(self._data) >= self._max_keys:
            self._purge()
        self._data[key] = (value, self._clock() + ttl)
