from __future__ import annotations

import json

from redis.asyncio import Redis

from keyserver.domain.entities import PublicKey
from keyserver.domain.ports.key_store import KeyStorePort


def _member(public_key: PublicKey) -> str:
    # canonical form, so equal keys map to the same set member
    return json.dumps(public_key.to_dict(), sort_keys=True, separators=(",", ":"))


class RedisKeyStore(KeyStorePort):
    """One Redis set per email digest; SADD/SREM are atomic on the server."""

    def __init__(self, redis: Redis, *, key_prefix: str = "keys:") -> None:
        self._redis = redis
        self._prefix = key_prefix

    def _key(self, email_digest: bytes) -> str:
        return f"{self._prefix}{email_digest.hex()}"

    async def get(self, email_digest: bytes) -> set[PublicKey]:
        members = await self._redis.smembers(self._key(email_digest))
        return {PublicKey.from_dict(json.loads(m)) for m in members}

    async def put(self, email_digest: bytes, public_key: PublicKey) -> None:
        await self._redis.sadd(self._key(email_digest), _member(public_key))

    async def delete(self, email_digest: bytes, public_key: PublicKey) -> None:
        await self._redis.srem(self._key(email_digest), _member(public_key))
