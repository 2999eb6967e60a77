"""Single-use login nonces.

A nonce is issued before the wallet signs the login message and consumed
exactly once when the signature is verified. Both stores expire unused
nonces after ttl_seconds.
"""

import uuid
from datetime import datetime, timedelta
from typing import Protocol

import redis.asyncio as aioredis

from src.bl_common.datetime_utils import Clock, utc_now

_KEY_PREFIX = "auth:nonce:"


def new_nonce() -> str:
    """32 hex chars, the format wallets embed at the end of the signed message."""
    return uuid.uuid4().hex


class NonceStoreProtocol(Protocol):
    async def issue(self) -> str: ...

    async def consume(self, nonce: str) -> bool: ...


class RedisNonceStore:
    def __init__(self, redis: aioredis.Redis, ttl_seconds: int) -> None:
        self._redis = redis
        self._ttl = ttl_seconds

    async def issue(self) -> str:
        while True:
            nonce = new_nonce()
            if await self._redis.set(f"{_KEY_PREFIX}{nonce}", "1", nx=True, ex=self._ttl):
                return nonce

    async def consume(self, nonce: str) -> bool:
        # DEL is atomic: of two concurrent consumers only one sees 1
        return bool(await self._redis.delete(f"{_KEY_PREFIX}{nonce}"))


class InMemoryNonceStore:
    def __init__(self, ttl_seconds: int, clock: Clock = utc_now) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._expires_at: dict[str, datetime] = {}

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [n for n, exp in self._expires_at.items() if exp <= now]
        for nonce in expired:
            del self._expires_at[nonce]

    async def issue(self) -> str:
        self._purge_expired()
        nonce = new_nonce()
        self._expires_at[nonce] = self._clock() + self._ttl
        return nonce

    async def consume(self, nonce: str) -> bool:
        self._purge_expired()
        return self._expires_at.pop(nonce, None) is not None
