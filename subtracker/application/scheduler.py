"""
Background scheduler: runs periodic jobs inside the FastAPI process.

Jobs:
  - Subscription reminders (daily at REMINDER_HOUR:REMINDER_MINUTE)
  - Subscription reminders once at startup
"""
import logging
from datetime import date

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from subtracker.config import get_settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True)


def run_reminder_sweep(today: date | None = None) -> int:
    """Load the collection and deliver today's reminders. Returns reminders sent."""
    from subtracker.infrastructure.db.session import get_session_factory
    from subtracker.infrastructure.db.store import SubscriptionStore
    from subtracker.application.push_service import WebPushNotifier
    from subtracker.application.reminders import dispatch_reminders

    try:
        if today is None:
            today = get_settings().today()
        session_factory = get_session_factory()
        notifier = WebPushNotifier(session_factory)
        subs = SubscriptionStore(session_factory).load()
        return dispatch_reminders(
            subs, today, notifier, audio=notifier, enabled=notifier.is_authorized(),
        )
    except Exception:
        logger.exception("Subscription reminders job failed")
        return 0


def _run_subscription_reminders():
    run_reminder_sweep()


def start_scheduler():
    """Start the background scheduler with all periodic jobs."""
    settings = get_settings()
    scheduler.configure(timezone=settings.TIMEZONE)

    scheduler.add_job(
        _run_subscription_reminders,
        CronTrigger(hour=settings.REMINDER_HOUR, minute=settings.REMINDER_MINUTE, timezone=settings.TIMEZONE),
        id="subscription_reminders",
        replace_existing=True,
    )

    # Application start counts as a tick
    scheduler.add_job(
        _run_subscription_reminders,
        id="subscription_reminders_startup",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(
        "Scheduler started: subscription_reminders (%02d:%02d %s daily + startup)",
        settings.REMINDER_HOUR, settings.REMINDER_MINUTE, settings.TIMEZONE,
    )


def shutdown_scheduler():
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
