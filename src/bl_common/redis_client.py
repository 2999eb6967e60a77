"""Redis client factory — used for wallet nonces and domain-event pub/sub only.

NOT used for pool totals (those go through the pool store under a per-market lock).
The composition root owns the returned client and closes it on shutdown.
"""

import redis.asyncio as aioredis


def create_redis(url: str) -> aioredis.Redis:
    """Create a Redis client backed by a connection pool."""
    return aioredis.from_url(url, decode_responses=True)


async def close_redis(client: aioredis.Redis | None) -> None:
    if client is not None:
        await client.aclose()
