"""
Scheduler Configuration

Configures the in-process APScheduler that runs the daily retention sweep.
"""

import logging
import os
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class SchedulerConfig:
    """Scheduler configuration settings."""

    # Local wall-clock midnight unless SCHEDULER_TIMEZONE says otherwise
    timezone = os.getenv("SCHEDULER_TIMEZONE") or None
    cleanup_hour = int(os.getenv("CLEANUP_HOUR", 0))
    cleanup_minute = int(os.getenv("CLEANUP_MINUTE", 0))

    job_defaults = {
        "coalesce": True,
        "max_instances": 1,
        "misfire_grace_time": 3600,
    }


def make_scheduler(
    cleanup_job: Callable[[], object],
    job_id: str,
    config: Optional[SchedulerConfig] = None,
) -> BackgroundScheduler:
    """
    Create a background scheduler with the daily cleanup job registered.

    The scheduler is returned unstarted; the caller owns start() and
    shutdown().

    Args:
        cleanup_job: Zero-argument callable running one sweep
        job_id: Identifier of the cron job
        config: Scheduler settings

    Returns:
        Configured BackgroundScheduler
    """
    config = config or SchedulerConfig()
    kwargs = {"job_defaults": config.job_defaults}
    if config.timezone:
        kwargs["timezone"] = config.timezone
    scheduler = BackgroundScheduler(**kwargs)
    scheduler.add_job(
        cleanup_job,
        "cron",
        hour=config.cleanup_hour,
        minute=config.cleanup_minute,
        id=job_id,
        replace_existing=True,
    )
    logger.debug(
        f"Scheduled {job_id} daily at {config.cleanup_hour:02d}:{config.cleanup_minute:02d}"
    )
    return scheduler
