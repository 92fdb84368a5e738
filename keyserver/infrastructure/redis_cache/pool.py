from __future__ import annotations

import logging
from urllib.parse import urlsplit

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger("keyserver.infrastructure.redis_cache.pool")


def _redacted(url: str) -> str:
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return f"{parts.scheme}://{host}{parts.path}"


async def open_redis(url: str, *, timeout: float = 2.0) -> Redis:
    """
    One client (with its own connection pool) shared by the cache and the key
    store. Pings once so a wrong REDIS_URL fails startup instead of the first
    request. decode_responses=True -> cache entries and set members are str.
    """
    client = Redis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
    try:
        await client.ping()
    except (RedisError, OSError):
        await client.aclose()
        logger.exception("redis unreachable", extra={"url": _redacted(url)})
        raise
    logger.info("redis connected", extra={"url": _redacted(url)})
    return client
