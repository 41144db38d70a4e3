"""
Hourly Reminder Scheduler

Runs the reminder sweep at a fixed minute past every hour. The schedule is
also the retry policy: a sweep that fails as a whole is simply run again on
the next tick, and a follow-up whose notification failed is still due on the
next sweep because its remind_at remains in the past.

Can be replaced by any external cron hitting POST /jobs/check-reminders.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from config import settings
from jobs.runner import run_reminder_sweep
import logging
import sys

logger = logging.getLogger(__name__)

JOB_ID = "hourly_reminder_sweep"


def run_scheduled_sweep():
    """
    One scheduled sweep.

    Errors are logged and returned, never raised, so a bad hour does not
    take the scheduler down.
    """
    logger.info("=" * 60)
    logger.info("Starting hourly reminder sweep")
    logger.info("=" * 60)

    try:
        result = run_reminder_sweep()

        logger.info("Reminder sweep complete:")
        logger.info(f"  - Processed: {result.processed}")
        logger.info(f"  - Sent: {result.sent}")
        logger.info(f"  - Failed: {result.failed}")
        logger.info("=" * 60)

        return result.model_dump()

    except Exception as e:
        logger.error(f"Reminder sweep failed: {e}", exc_info=True)
        return {
            'status': 'error',
            'error': str(e)
        }


def start_scheduler(run_immediately: bool = False, minute: int = None):
    """
    Start the background scheduler for the hourly sweep.

    Args:
        run_immediately: If True, run one sweep right away
        minute: Minute past the hour to fire (defaults to REMINDER_SWEEP_MINUTE)

    Returns:
        APScheduler BackgroundScheduler instance
    """
    minute = settings.REMINDER_SWEEP_MINUTE if minute is None else minute
    scheduler = BackgroundScheduler()

    scheduler.add_job(
        run_scheduled_sweep,
        trigger=CronTrigger(minute=minute),
        id=JOB_ID,
        name='Hourly Reminder Sweep',
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    logger.info(f"Reminder scheduler started (runs at :{minute:02d} every hour)")

    if run_immediately:
        logger.info("Running reminder sweep immediately")
        run_scheduled_sweep()

    return scheduler


def stop_scheduler(scheduler):
    """
    Stop the background scheduler.

    Args:
        scheduler: APScheduler BackgroundScheduler instance
    """
    scheduler.shutdown(wait=False)
    logger.info("Reminder scheduler stopped")


if __name__ == '__main__':
    """
    Run one sweep directly.

    Usage:
        python -m schedulers.reminder_scheduler
    """
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    result = run_scheduled_sweep()

    if result.get('status') == 'error':
        print(f"\n❌ Sweep failed: {result.get('error')}")
        sys.exit(1)

    print("\n✅ Sweep finished")
    print(f"  Processed: {result['processed']}")
    print(f"  Sent: {result['sent']}")
    print(f"  Failed: {result['failed']}")
