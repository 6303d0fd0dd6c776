"""Tests for the finished-job purge schedule."""
from datetime import timedelta
from unittest.mock import MagicMock

from research_assistant.config import Settings
from research_assistant.scheduler import purge_finished_jobs, start_scheduler, stop_scheduler


def test_purge_uses_ttl() -> None:
    assistant = MagicMock()
    assistant.purge_jobs.return_value = 3

    assert purge_finished_jobs(assistant, ttl_hours=12) == 3
    assistant.purge_jobs.assert_called_once_with(timedelta(hours=12))


def test_scheduler_registers_purge_job() -> None:
    assistant = MagicMock()
    scheduler = start_scheduler(assistant, Settings(job_purge_interval_minutes=15, job_ttl_hours=6))
    try:
        job = scheduler.get_job("purge_finished_jobs")
        assert job is not None
        assert job.trigger.interval == timedelta(minutes=15)
        assert job.args == (assistant, 6)
    finally:
        stop_scheduler(scheduler)

    assert not scheduler.running


def test_stop_scheduler_tolerates_none() -> None:
    stop_scheduler(None)
