from __future__ import annotations

import logging
from datetime import tzinfo

from apscheduler.schedulers.background import BackgroundScheduler

from .auto_checkout import AutoCheckoutJob

logger = logging.getLogger(__name__)

AUTO_CHECKOUT_JOB_ID = "auto_checkout"


def build_auto_checkout_scheduler(
    job: AutoCheckoutJob,
    *,
    tz: tzinfo,
    interval_minutes: int = 5,
    process_all: bool = True,
) -> BackgroundScheduler:
    """Register the auto checkout sweep; the caller decides when to start it."""
    scheduler = BackgroundScheduler(
        timezone=tz,
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 60 * int(interval_minutes),
        },
    )
    scheduler.add_job(
        job.run,
        "interval",
        minutes=int(interval_minutes),
        id=AUTO_CHECKOUT_JOB_ID,
        kwargs={"process_all": bool(process_all)},
        replace_existing=True,
    )
    logger.info(
        "Auto checkout scheduled every %d minutes (process_all=%s)", int(interval_minutes), bool(process_all)
    )
    return scheduler
