"""Job registry and enqueueing utilities.

Provides a centralized way to enqueue background jobs from
anywhere in the application.
"""

from datetime import timedelta
from typing import Any

from arq import ArqRedis, create_pool

from tbsa.core.jobs.utils import get_redis_settings


class ArqPoolHolder:
    """Holder for the arq connection pool."""

    pool: ArqRedis | None = None


async def init_arq_pool() -> ArqRedis:
    """Initialize the arq connection pool.

    Should be called during application startup.
    """
    if ArqPoolHolder.pool is None:
        ArqPoolHolder.pool = await create_pool(get_redis_settings())
    return ArqPoolHolder.pool


async def get_arq_pool() -> ArqRedis:
    """Get the arq connection pool.

    Raises:
        RuntimeError: If the pool was not initialized
    """
    if ArqPoolHolder.pool is None:
        raise RuntimeError(
            "ARQ pool not initialized. Call init_arq_pool() during startup."
        )
    return ArqPoolHolder.pool


async def close_arq_pool() -> None:
    if ArqPoolHolder.pool is not None:
        await ArqPoolHolder.pool.close()
        ArqPoolHolder.pool = None


async def enqueue(
    job_name: str,
    *args: Any,
    _defer_by: timedelta | None = None,
    _job_id: str | None = None,
    **kwargs: Any,
) -> Any:
    """Enqueue a background job.

    Args:
        job_name: Name of the registered job function
        *args: Positional arguments for the job
        _defer_by: Delay execution by this duration
        _job_id: Custom job ID, for deduplication
        **kwargs: Keyword arguments for the job

    Returns:
        The arq job, or None if a job with the same ID is queued

    Example:
        await enqueue("expire_invite_codes", _job_id="expire-invite-codes")
    """
    pool = await get_arq_pool()
    return await pool.enqueue_job(
        job_name,
        *args,
        _defer_by=_defer_by,
        _job_id=_job_id,
        **kwargs,
    )
