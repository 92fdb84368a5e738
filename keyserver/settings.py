from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Identity
    email_salt: str = "salt"
    challenge_ttl_seconds: int = 15 * 60

    # Backends
    cache_backend: Literal["memory", "redis"] = "memory"
    store_backend: Literal["memory", "redis", "postgres"] = "memory"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    redis_url: str = "redis://redis:6379/0"
    redis_timeout_seconds: float = 2.0
    smtp_base_url: str = "http://localhost:8025"
    smtp_timeout_seconds: float = 5.0

    # Links
    public_base_url: str = "http://localhost:8000"
    # emailed links can point at /open, which redirects here with the same query
    open_url: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
