"""Redis pub/sub event publisher (JSON payload on one channel)."""

import json

import redis.asyncio as aioredis

from src.bl_events.domain.events import DomainEvent

EVENTS_CHANNEL = "blink:events"


class RedisEventPublisher:
    def __init__(self, redis: aioredis.Redis, channel: str = EVENTS_CHANNEL) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, event: DomainEvent) -> None:
        await self._redis.publish(self._channel, json.dumps(event.to_dict()))
