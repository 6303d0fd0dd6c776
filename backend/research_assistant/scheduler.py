"""Background maintenance: periodic purge of finished jobs."""
import logging
from datetime import timedelta
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .assistant import PaperAssistant
from .config import Settings

logger = logging.getLogger(__name__)


def purge_finished_jobs(assistant: PaperAssistant, ttl_hours: int) -> int:
    """Remove completed and failed jobs older than the TTL."""
    removed = assistant.purge_jobs(timedelta(hours=ttl_hours))
    logger.info(f"Job purge complete. Removed: {removed}")
    return removed


def start_scheduler(assistant: PaperAssistant, settings: Settings) -> BackgroundScheduler:
    """Start a background scheduler running the job purge."""
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        purge_finished_jobs,
        trigger=IntervalTrigger(minutes=settings.job_purge_interval_minutes),
        args=[assistant, settings.job_ttl_hours],
        id="purge_finished_jobs",
        name="Purge finished analysis jobs",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started. Purging jobs older than {settings.job_ttl_hours}h "
        f"every {settings.job_purge_interval_minutes} minutes."
    )
    return scheduler


def stop_scheduler(scheduler: Optional[BackgroundScheduler]):
    """Stop the background scheduler."""
    if scheduler is None or not scheduler.running:
        return
    scheduler.shutdown()
    logger.info("Scheduler stopped.")
