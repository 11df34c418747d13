"""arq worker configuration.

Run the worker with:
    arq tbsa.core.jobs.worker.WorkerSettings
"""

from typing import Any, ClassVar

import structlog
from arq import cron
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import tbsa.models  # noqa: F401
from tbsa.config import settings
from tbsa.core.database.session import build_engine
from tbsa.core.jobs.tasks.cleanup import cleanup_expired_sessions, expire_invite_codes
from tbsa.core.jobs.utils import get_redis_settings
from tbsa.core.logging import configure_logging


async def startup(ctx: dict[str, Any]) -> None:
    """Open the database engine shared by all jobs.

    Args:
        ctx: Worker context dict (shared across all jobs)
    """
    configure_logging()
    log = structlog.get_logger()
    log.info("worker_startup", environment=settings.environment)

    engine = build_engine(settings.async_database_url)
    ctx["db_engine"] = engine
    ctx["db_session_factory"] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def shutdown(ctx: dict[str, Any]) -> None:
    log = structlog.get_logger()
    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
    log.info("worker_shutdown")


class WorkerSettings:
    """arq worker settings: registered jobs, cron schedules and limits."""

    functions: ClassVar[list[Any]] = [
        cleanup_expired_sessions,
        expire_invite_codes,
    ]

    cron_jobs: ClassVar[list[Any]] = [
        # Every hour on the hour
        cron(cleanup_expired_sessions, minute=0),
        # Daily at 02:30
        cron(expire_invite_codes, hour=2, minute=30),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 10
    job_timeout = 300
    keep_result = 3600
    retry_jobs = True
    max_tries = 3
