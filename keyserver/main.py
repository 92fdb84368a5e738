import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from redis.asyncio import Redis

from keyserver.application.key_server import KeyServer
from keyserver.domain.ports.challenge_cache import ChallengeCachePort
from keyserver.domain.ports.key_store import KeyStorePort
from keyserver.domain.services import Digester
from keyserver.infrastructure.db.keys_repo import PgKeyStore
from keyserver.infrastructure.db.pool import close_pool, open_pool
from keyserver.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter
from keyserver.infrastructure.email.notifier import EmailNotifier, LoggingNotifier
from keyserver.infrastructure.memory.challenge_cache import InMemoryChallengeCache
from keyserver.infrastructure.memory.key_store import InMemoryKeyStore
from keyserver.infrastructure.redis_cache.challenge_cache import RedisChallengeCache
from keyserver.infrastructure.redis_cache.key_store import RedisKeyStore
from keyserver.infrastructure.redis_cache.pool import open_redis
from keyserver.logging import setup_logging
from keyserver.presentation.api import api
from keyserver.presentation.errors import register_error_handlers
from keyserver.settings import Settings, get_settings

logger = logging.getLogger("keyserver.main")


def uses_redis(settings: Settings) -> bool:
    return "redis" in (settings.cache_backend, settings.store_backend)


def build_cache(settings: Settings, redis: Optional[Redis]) -> ChallengeCachePort:
    if settings.cache_backend == "redis":
        return RedisChallengeCache(redis)
    return InMemoryChallengeCache()


async def build_store(settings: Settings, redis: Optional[Redis]) -> KeyStorePort:
    if settings.store_backend == "redis":
        return RedisKeyStore(redis)
    if settings.store_backend == "postgres":
        return PgKeyStore(await open_pool())
    return InMemoryKeyStore()


def build_key_server(
    settings: Settings, cache: ChallengeCachePort, store: KeyStorePort
) -> KeyServer:
    return KeyServer(
        digester=Digester(settings.email_salt.encode("utf-8")),
        cache=cache,
        store=store,
        ttl_seconds=settings.challenge_ttl_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # startup
    redis = None
    if uses_redis(settings):
        redis = await open_redis(
            settings.redis_url, timeout=settings.redis_timeout_seconds
        )
    cache = build_cache(settings, redis)
    store = await build_store(settings, redis)
    logger.info(
        "backends selected",
        extra={"cache": settings.cache_backend, "store": settings.store_backend},
    )

    email_adapter = HttpSmtpEmailAdapter(
        base_url=settings.smtp_base_url, timeout=settings.smtp_timeout_seconds
    )
    app.state.key_server = build_key_server(settings, cache, store)
    app.state.notifier = LoggingNotifier(
        EmailNotifier(email_adapter, public_base_url=settings.public_base_url)
    )

    try:
        yield
    finally:
        # shutdown
        await email_adapter.aclose()
        if redis is not None:
            await redis.aclose()
        if settings.store_backend == "postgres":
            await close_pool()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="Email Verifying Keyserver", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(api)
    register_error_handlers(app)
    return app


app = create_app()
