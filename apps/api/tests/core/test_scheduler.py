"""
Unit tests for the background job scheduler registry.
"""

from unittest.mock import AsyncMock

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from gold2money.core import scheduler


@pytest.fixture(autouse=True)
def clean_registry():
    saved = dict(scheduler._job_registry)
    scheduler._job_registry.clear()
    yield
    scheduler._job_registry.clear()
    scheduler._job_registry.update(saved)


class TestRegisterJob:
    """Tests for register_job."""

    def test_adds_job_to_registry(self):
        job = AsyncMock()
        trigger = IntervalTrigger(hours=1)

        scheduler.register_job("cleanup", job, trigger)

        assert scheduler._job_registry["cleanup"] == (job, trigger)

    def test_same_id_replaces_job(self):
        scheduler.register_job("cleanup", AsyncMock(), IntervalTrigger(hours=1))
        replacement = AsyncMock()

        scheduler.register_job("cleanup", replacement, IntervalTrigger(hours=2))

        assert scheduler._job_registry["cleanup"][0] is replacement


class TestTriggerJobManually:
    """Tests for trigger_job_manually."""

    @pytest.mark.asyncio
    async def test_runs_job(self):
        job = AsyncMock()
        scheduler.register_job("cleanup", job, IntervalTrigger(hours=1))

        result = await scheduler.trigger_job_manually("cleanup")

        job.assert_awaited_once()
        assert result["status"] == "success"
        assert result["job_id"] == "cleanup"

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self):
        scheduler.register_job(
            "cleanup", AsyncMock(side_effect=RuntimeError("disk full")), IntervalTrigger(hours=1)
        )

        result = await scheduler.trigger_job_manually("cleanup")

        assert result["status"] == "error"
        assert result["error"] == "disk full"

    @pytest.mark.asyncio
    async def test_unknown_job_raises(self):
        with pytest.raises(ValueError, match="not found"):
            await scheduler.trigger_job_manually("missing")


class TestSchedulerLifecycle:
    """Tests for start_scheduler and stop_scheduler."""

    @pytest.mark.asyncio
    async def test_registered_jobs_are_scheduled_on_start(self):
        scheduler.register_job("cleanup", AsyncMock(), IntervalTrigger(hours=1))

        started = await scheduler.start_scheduler()
        try:
            assert started.running
            assert started.get_job("cleanup") is not None
            assert scheduler.get_scheduler() is started
        finally:
            await scheduler.stop_scheduler()

        assert scheduler.get_scheduler() is None

    @pytest.mark.asyncio
    async def test_stop_without_start_is_a_no_op(self):
        await scheduler.stop_scheduler()
