"""
Background jobs run by APScheduler.

- ``lifecycle_sweep``: every SWEEP_INTERVAL_MINUTES, auto-completes every
  confirmed appointment whose end has passed.
- ``reminder_ledger_cleanup``: daily at 03:00, forgets old reminder entries.

Each job catches and logs its own failures so the scheduler thread keeps
running; the next run retries whatever failed.
"""

from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from vetclinic.core import config
from vetclinic.core.logging_config import get_logger

logger = get_logger(__name__)


def run_lifecycle_sweep(container) -> None:
    logger.info("Starting scheduled lifecycle sweep")
    try:
        result = container.sweeper.run_all()
        logger.info(
            "Scheduled lifecycle sweep completed",
            extra={
                "context": {
                    "job": "lifecycle_sweep",
                    "completed": len(result.completed),
                    "failed": len(result.failed),
                }
            },
        )
    except Exception as e:
        logger.error(
            "Scheduled lifecycle sweep failed",
            extra={"context": {"job": "lifecycle_sweep", "error": str(e)}},
            exc_info=True,
        )


def run_reminder_cleanup(container) -> None:
    try:
        removed = container.reminders.clear_old()
        logger.info(
            "Reminder ledger cleanup completed",
            extra={"context": {"job": "reminder_ledger_cleanup", "removed": removed}},
        )
    except Exception as e:
        logger.error(
            "Reminder ledger cleanup failed",
            extra={"context": {"job": "reminder_ledger_cleanup", "error": str(e)}},
            exc_info=True,
        )


def build_scheduler(container, interval_minutes: Optional[int] = None) -> BackgroundScheduler:
    """Create a scheduler with both jobs registered but not started."""
    minutes = interval_minutes or config.SWEEP_INTERVAL_MINUTES
    scheduler = BackgroundScheduler(timezone=config.APP_TZ)
    scheduler.add_job(
        run_lifecycle_sweep,
        trigger=IntervalTrigger(minutes=minutes),
        args=[container],
        id="lifecycle_sweep",
        name="Auto-complete past confirmed appointments",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.add_job(
        run_reminder_cleanup,
        trigger=CronTrigger(hour=3, minute=0),
        args=[container],
        id="reminder_ledger_cleanup",
        name="Clear old reminder ledger entries",
        replace_existing=True,
    )
    logger.info(
        "Background jobs registered",
        extra={
            "context": {
                "sweep_interval_minutes": minutes,
                "cleanup_schedule": "daily at 03:00",
            }
        },
    )
    return scheduler


def start_scheduler(app, container) -> Optional[BackgroundScheduler]:
    if not config.get_scheduler_enabled():
        logger.info("Background scheduler disabled")
        return None

    scheduler = build_scheduler(container)
    scheduler.start()
    logger.info("Background scheduler started")

    # Store scheduler reference to prevent garbage collection
    app.config["SCHEDULER"] = scheduler
    return scheduler
