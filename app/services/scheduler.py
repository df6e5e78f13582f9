# app/services/scheduler.py
"""
Daily alert sweep scheduling (APScheduler, in-process).
ALERTS_CRON is a standard 5-field crontab evaluated in ALERTS_TIMEZONE.
Only one job instance runs at a time; a missed run is coalesced into one.
"""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import settings
from app.database import SessionLocal
from app.services.alert_sweep import run_alert_sweep
from app.utils.logger import get_logger

logger = get_logger(__name__)

JOB_ID = "daily-alert-sweep"

scheduler: Optional[AsyncIOScheduler] = None


async def run_scheduled_sweep(session_factory=SessionLocal):
    """Scheduler entry point: one session per run, errors logged (the next run retries)."""
    db = session_factory()
    try:
        report = await run_alert_sweep(db, settings.ALERTS_WINDOW_DAYS)
        logger.info(f"[CRON] alert sweep finished: {report.alerts_created} new alert(s)")
    except Exception as exc:
        db.rollback()
        logger.error(f"[CRON] alert sweep failed: {exc}", exc_info=True)
    finally:
        db.close()


def start_scheduler() -> Optional[AsyncIOScheduler]:
    """Start the cron job once per process. Returns None when disabled."""
    global scheduler
    if not settings.ALERTS_SCHEDULER_ENABLED:
        logger.info("⏸  Alert scheduler disabled (ALERTS_SCHEDULER_ENABLED=false)")
        return None
    if scheduler is not None:
        return scheduler

    trigger = CronTrigger.from_crontab(settings.ALERTS_CRON, timezone=settings.ALERTS_TIMEZONE)
    scheduler = AsyncIOScheduler(timezone=settings.ALERTS_TIMEZONE)
    scheduler.add_job(
        run_scheduled_sweep,
        trigger,
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"⏰ Alert sweep scheduled: '{settings.ALERTS_CRON}' ({settings.ALERTS_TIMEZONE})")
    return scheduler


def stop_scheduler():
    global scheduler
    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("⏹  Alert scheduler stopped")


def describe_scheduler() -> dict:
    if scheduler is None:
        return {"enabled": settings.ALERTS_SCHEDULER_ENABLED, "running": False, "next_run": None}
    job = scheduler.get_job(JOB_ID)
    next_run = job.next_run_time.isoformat() if job and job.next_run_time else None
    return {"enabled": True, "running": scheduler.running, "next_run": next_run, "cron": settings.ALERTS_CRON}
