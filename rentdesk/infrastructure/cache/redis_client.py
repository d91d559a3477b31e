# rentdesk/infrastructure/cache/redis_client.py

import redis.asyncio as redis


class RedisClient:
    def __init__(self, url: str):
        self.client = redis.from_url(
            url,
            decode_responses=True,
        )

    async def incr(self, key: str) -> int:
        """Increment key, return new value."""
        return await self.client.incr(key)

    async def expire(self, key: str, seconds: int) -> None:
        """Set TTL on key."""
        await self.client.expire(key, seconds)

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; negative when the key has none or is gone."""
        return await self.client.ttl(key)

    async def close(self) -> None:
        await self.client.aclose()
