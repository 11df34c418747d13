"""Unit tests for the arq job registry."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from tbsa.core.jobs.registry import (
    ArqPoolHolder,
    close_arq_pool,
    enqueue,
    get_arq_pool,
    init_arq_pool,
)
from tbsa.core.jobs.tasks import cleanup_expired_sessions, expire_invite_codes
from tbsa.core.jobs.worker import WorkerSettings


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def reset_arq_pool():
    """Reset ARQ pool holder before each test."""
    ArqPoolHolder.pool = None
    yield
    ArqPoolHolder.pool = None


class TestPoolLifecycle:
    """Tests for init, get and close of the pool."""

    async def test_init_creates_pool_first_time(self):
        """Verify pool is created on first init."""
        mock_pool = AsyncMock()

        with patch(
            "tbsa.core.jobs.registry.create_pool", new_callable=AsyncMock
        ) as mock_create:
            mock_create.return_value = mock_pool

            result = await init_arq_pool()

            assert result is mock_pool
            assert ArqPoolHolder.pool is mock_pool
            mock_create.assert_awaited_once()

    async def test_init_returns_existing_pool(self):
        """Verify same pool is returned if already initialized."""
        existing_pool = AsyncMock()
        ArqPoolHolder.pool = existing_pool

        with patch(
            "tbsa.core.jobs.registry.create_pool", new_callable=AsyncMock
        ) as mock_create:
            result = await init_arq_pool()

            assert result is existing_pool
            mock_create.assert_not_awaited()

    async def test_get_without_init_raises(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            await get_arq_pool()

    async def test_close_releases_pool(self):
        pool = AsyncMock()
        ArqPoolHolder.pool = pool

        await close_arq_pool()

        pool.close.assert_awaited_once()
        assert ArqPoolHolder.pool is None


class TestEnqueue:
    """Tests for enqueue."""

    async def test_enqueue_forwards_job_options(self):
        pool = AsyncMock()
        ArqPoolHolder.pool = pool

        await enqueue(
            "expire_invite_codes",
            _defer_by=timedelta(minutes=5),
            _job_id="expire-invite-codes",
        )

        pool.enqueue_job.assert_awaited_once_with(
            "expire_invite_codes",
            _defer_by=timedelta(minutes=5),
            _job_id="expire-invite-codes",
        )


class TestWorkerSettings:
    """Tests for the worker configuration."""

    def test_cleanup_jobs_are_registered(self):
        assert cleanup_expired_sessions in WorkerSettings.functions
        assert expire_invite_codes in WorkerSettings.functions

    def test_cleanup_jobs_are_scheduled(self):
        scheduled = {job.name for job in WorkerSettings.cron_jobs}

        assert any("cleanup_expired_sessions" in name for name in scheduled)
        assert any("expire_invite_codes" in name for name in scheduled)
