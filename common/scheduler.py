"""
Background task scheduler for the daily rental-finance jobs.
Uses APScheduler to run tasks in the background without requiring external services.

Jobs:
- overdue refresh + open-ended lease roll-forward, daily at 00:15
- penalty run, daily at PENALTY_JOB_HOUR:30
"""
import logging
import atexit
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from django.conf import settings
from django.core.management import call_command
from django.utils import timezone

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def calculate_penalties_job():
    """Background job applying late penalties to every past-due installment."""
    try:
        logger.info("Starting scheduled penalty calculation...")
        call_command('calculate_penalties')
        logger.info("Scheduled penalty calculation completed successfully")
    except Exception as e:
        logger.error(f"Error in scheduled penalty calculation: {str(e)}", exc_info=True)


def roll_schedules_job():
    """Mark past-due installments OVERDUE and extend open-ended leases."""
    from installments.services import InstallmentService

    try:
        logger.info("Starting scheduled installment maintenance...")
        updated = InstallmentService().refresh_overdue_statuses()
        logger.info(f"{updated} installments marked overdue")
        call_command('generate_installments', extend=True)
        logger.info("Scheduled installment maintenance completed successfully")
    except Exception as e:
        logger.error(f"Error in scheduled installment maintenance: {str(e)}", exc_info=True)


def start_scheduler():
    """
    Initialize and start the background scheduler.
    This should be called once when Django starts.
    """
    global scheduler

    if scheduler is not None and scheduler.running:
        logger.warning("Scheduler is already running")
        return

    try:
        scheduler = BackgroundScheduler()
        tz = timezone.get_current_timezone()
        penalty_hour = int(getattr(settings, 'PENALTY_JOB_HOUR', 1))

        scheduler.add_job(
            roll_schedules_job,
            trigger=CronTrigger(hour=0, minute=15, timezone=tz),
            id='roll_installment_schedules',
            name='Refresh Overdue Installments',
            replace_existing=True,
            max_instances=1,  # Prevent overlapping runs
            coalesce=True
        )
        scheduler.add_job(
            calculate_penalties_job,
            trigger=CronTrigger(hour=penalty_hour, minute=30, timezone=tz),
            id='calculate_penalties',
            name='Calculate Late Penalties',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )

        scheduler.start()
        logger.info("Background scheduler started successfully")
        logger.info(f"Penalty run scheduled daily at {penalty_hour:02d}:30 ({tz})")

        atexit.register(lambda: stop_scheduler())

    except Exception as e:
        logger.error(f"Failed to start scheduler: {str(e)}", exc_info=True)
        scheduler = None


def stop_scheduler():
    """
    Stop the background scheduler.
    Should be called when Django shuts down.
    """
    global scheduler

    if scheduler is not None and scheduler.running:
        try:
            scheduler.shutdown(wait=True)
            logger.info("Background scheduler stopped")
        except Exception as e:
            logger.error(f"Error stopping scheduler: {str(e)}", exc_info=True)
        finally:
            scheduler = None
