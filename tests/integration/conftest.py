# tests/integration/conftest.py
import os
from pathlib import Path

import psycopg
import pytest
import pytest_asyncio
from psycopg_pool import AsyncConnectionPool, PoolTimeout
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from keyserver.infrastructure.db.keys_repo import PgKeyStore
from keyserver.infrastructure.redis_cache.challenge_cache import RedisChallengeCache
from keyserver.infrastructure.redis_cache.key_store import RedisKeyStore

MIGRATIONS = Path(__file__).resolve().parents[2] / "migrations"


@pytest_asyncio.fixture
async def redis_client():
    url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
    r = Redis.from_url(
        url, encoding="utf-8", decode_responses=True, socket_connect_timeout=1
    )
    try:
        await r.ping()
    except (RedisConnectionError, OSError):
        await r.aclose()
        pytest.skip(f"redis not reachable at {url}")
    try:
        yield r
    finally:
        await r.aclose()


@pytest_asyncio.fixture
async def pg_pool():
    url = os.environ.get("DATABASE_URL", "postgresql://app:app@db:5432/app")
    pool = AsyncConnectionPool(url, min_size=1, max_size=4, timeout=5, open=False)
    try:
        await pool.open(wait=True, timeout=5)
    except (PoolTimeout, psycopg.OperationalError):
        await pool.close()
        pytest.skip(f"postgres not reachable at {url}")
    async with pool.connection() as conn:
        for path in sorted(MIGRATIONS.glob("*.sql")):
            await conn.execute(path.read_text(encoding="utf-8"))
    try:
        yield pool
    finally:
        await pool.close()


@pytest.fixture()
def redis_cache(redis_client, clock):
    return RedisChallengeCache(redis_client, key_prefix="chal:test:", clock=clock)


@pytest.fixture()
def redis_store(redis_client):
    return RedisKeyStore(redis_client, key_prefix="keys:test:")


@pytest.fixture()
def pg_store(pg_pool):
    return PgKeyStore(pg_pool)

