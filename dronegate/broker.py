"""Redis publish/subscribe wrapper used to relay messages between endpoints."""

import redis.asyncio as aioredis

DEFAULT_URL = "redis://localhost:6379/0"


class RedisBroker:
    """Publishes and subscribes to Redis channels through an async client."""

    def __init__(self, client):
        self._client = client

    async def publish(self, channel, message):
        """Publish ``message`` and return the number of receivers."""
        return await self._client.publish(channel, message)

    async def subscribe(self, channel):
        """Yield each payload published on ``channel`` until closed."""
        pubsub = self._client.pubsub()
        await pubsub.subscribe(channel)
        try:
            async for item in pubsub.listen():
                if item.get("type") != "message":
                    continue
                data = item["data"]
                yield data.decode() if isinstance(data, bytes) else data
        finally:
            await pubsub.aclose()

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


async def connect(url=DEFAULT_URL):
    """Open a connection to Redis, checking it with a ping."""
    client = aioredis.from_url(url, decode_responses=True)
    try:
        await client.ping()
    except Exception:
        await client.aclose()
        raise
    return RedisBroker(client)