"""Redis-backed TTL store — implements DedupStorePort."""

from typing import Optional

import redis.asyncio as aioredis

KEY_PREFIX = "banana:dedup:"


class RedisDedupStore:
    """Shared dedup keys for multi-instance deployments (SET ... EX ttl)."""

    def __init__(self, client: aioredis.Redis, prefix: str = KEY_PREFIX):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> "RedisDedupStore":
        return cls(aioredis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Optional[str]:
        value = await self._client.get(self._prefix + key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def put(self, key: str, value: str, ttl: int) -> None:
        await self._client.set(self._prefix + key, value, ex=ttl)

    async def close(self) -> None:
        await self._client.aclose()
