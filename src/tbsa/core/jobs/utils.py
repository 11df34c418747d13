"""Shared helpers for the job queue."""

from arq.connections import RedisSettings

from tbsa.config import settings


def get_redis_settings() -> RedisSettings:
    """Build arq Redis settings from the configured Redis URL."""
    return RedisSettings.from_dsn(str(settings.redis_url))
