"""Tests for scheduler setup and job definitions."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest


class TestClippingJob:
    @pytest.mark.asyncio
    async def test_runs_aggregator(self):
        from clipping.scheduler.jobs import clipping_job

        report = MagicMock()
        report.sections = [MagicMock(), MagicMock()]
        report.failed_sections = []
        report.matched_rules = ["pregao"]
        aggregator = MagicMock()
        aggregator.run = AsyncMock(return_value=report)

        with patch("clipping.services.get_aggregator", return_value=aggregator):
            await clipping_job()

        aggregator.run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_tolerates_failed_run(self, caplog):
        from clipping.scheduler.jobs import clipping_job

        aggregator = MagicMock()
        aggregator.run = AsyncMock(return_value=None)

        with patch("clipping.services.get_aggregator", return_value=aggregator):
            await clipping_job()

        assert "produced no report" in caplog.text


class TestCreateScheduler:
    def test_daily_job_registered(self, fresh_config):
        from clipping.scheduler import setup

        with patch.object(setup, "config", fresh_config):
            scheduler = setup.create_scheduler()

        assert [job.id for job in scheduler.get_jobs()] == ["daily_clipping"]

    def test_startup_run_when_configured(self, fresh_config):
        from clipping.scheduler import setup

        fresh_config._merge_config({"scheduler": {"startup_run_delay": 5}})
        with patch.object(setup, "config", fresh_config):
            scheduler = setup.create_scheduler()

        ids = {job.id for job in scheduler.get_jobs()}
        assert ids == {"daily_clipping", "startup_clipping"}


def test_error_listener_logs(caplog):
    from clipping.scheduler.error_handler import job_error_listener

    event = MagicMock()
    event.job_id = "daily_clipping"
    event.exception = RuntimeError("boom")
    event.traceback = None

    job_error_listener(event)

    assert "daily_clipping" in caplog.text
    assert "boom" in caplog.text
