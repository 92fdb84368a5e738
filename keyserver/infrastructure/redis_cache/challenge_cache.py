from __future__ import annotations

import json
import math
import time
from typing import Callable

from redis.asyncio import Redis

from keyserver.domain.entities import PendingRecord
from keyserver.domain.errors import NotFound
from keyserver.domain.ports.challenge_cache import ChallengeCachePort


class RedisChallengeCache(ChallengeCachePort):
    """
    Challenge cache on Redis keys with a native TTL.

    Redis may still return a key for a moment after its TTL has passed, and the
    TTL is rounded up to whole seconds, so every entry also carries its own
    expires_at which is checked on each read.
    """

    def __init__(
        self,
        redis: Redis,
        *,
        key_prefix: str = "chal:",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._clock = clock

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _decode(self, raw: str | None) -> PendingRecord:
        if raw is None:
            raise NotFound()
        entry = json.loads(raw)
        if self._clock() >= float(entry["expires_at"]):
            raise NotFound()
        return PendingRecord.from_dict(entry["record"])

    async def set(self, key: str, record: PendingRecord, ttl_seconds: int) -> None:
        payload = json.dumps(
            {"record": record.to_dict(), "expires_at": self._clock() + ttl_seconds}
        )
        await self._redis.set(self._key(key), payload, ex=max(1, math.ceil(ttl_seconds)))

    async def get(self, key: str) -> PendingRecord:
        return self._decode(await self._redis.get(self._key(key)))

    async def delete(self, key: str) -> None:
        await self._redis.delete(self._key(key))

    async def pop(self, key: str) -> PendingRecord:
        # GETDEL: only one concurrent caller can read the value
        return self._decode(await self._redis.getdel(self._key(key)))
