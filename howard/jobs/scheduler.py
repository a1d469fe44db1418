"""
Background jobs for Howard.

Uses APScheduler BackgroundScheduler for recurring task generation and
notification cleanup. Only one worker starts the scheduler (file-lock guard)
so instances are not generated twice.
"""

import os
import atexit
import fcntl
from apscheduler.schedulers.background import BackgroundScheduler
from core.utils.logging_config import get_logger

logger = get_logger('howard.jobs.scheduler')

scheduler = BackgroundScheduler(daemon=True, timezone='UTC')
_lock_file = None


def generate_recurring_tasks():
    """Create due instances of recurring tasks."""
    try:
        from tasks.services.recurrence_service import process_recurring_tasks
        result = process_recurring_tasks()
        if result['created'] or result['errors']:
            logger.info(f"Recurring tasks: {result['created']} created, {len(result['errors'])} errors")
    except Exception as e:
        logger.error(f"Recurring task job failed: {e}")


def cleanup_old_notifications():
    """Delete read in-app notifications older than 90 days."""
    try:
        from core.notifications.repositories.in_app_repo import InAppNotificationRepository
        count = InAppNotificationRepository().delete_old(days=90)
        if count > 0:
            logger.info(f"Cleanup: deleted {count} old notifications (>90 days)")
    except Exception as e:
        logger.error(f"Notification cleanup task failed: {e}")


def _acquire_scheduler_lock():
    """Try to acquire an exclusive file lock. Returns True if this process won."""
    global _lock_file
    try:
        lock_path = os.path.join(os.path.dirname(__file__), '..', '.scheduler.lock')
        _lock_file = open(lock_path, 'w')
        fcntl.flock(_lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        _lock_file.write(str(os.getpid()))
        _lock_file.flush()
        return True
    except (IOError, OSError):
        if _lock_file:
            _lock_file.close()
            _lock_file = None
        return False


def start_scheduler():
    """Start the background scheduler.

    Uses a file lock so only one gunicorn worker runs the jobs.
    Other workers skip silently.
    """
    if scheduler.running:
        return

    if not _acquire_scheduler_lock():
        logger.debug(f"Scheduler lock held by another worker, skipping (pid={os.getpid()})")
        return

    scheduler.add_job(
        generate_recurring_tasks,
        'interval',
        hours=1,
        id='recurring_tasks',
        replace_existing=True,
        misfire_grace_time=300,
        coalesce=True,
    )

    scheduler.add_job(
        cleanup_old_notifications,
        'cron',
        hour=1,
        minute=0,
        id='cleanup_old_notifications',
        replace_existing=True,
        misfire_grace_time=300,
        coalesce=True,
    )

    scheduler.start()
    atexit.register(stop_scheduler)
    logger.info(f"Background scheduler started (pid={os.getpid()})")


def stop_scheduler():
    """Stop the background scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
