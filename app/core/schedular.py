import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.core.database import SessionLocal
from app.services.notification import NotificationService
from app.services.report import ReportService

logger = logging.getLogger(__name__)


def dispatch_notifications():
    """Send queued emails. Failures stay queued for the next run."""
    db = SessionLocal()
    try:
        result = NotificationService(db).dispatch_pending()
        if result["sent"] or result["failed"]:
            logger.info(
                f"Notification dispatch: {result['sent']} sent, {result['failed']} failed"
            )
    except Exception as e:
        logger.error(f"Error during notification dispatch: {e}")
    finally:
        db.close()


def reconcile_report_cascades():
    """
    Finish report cascades left half-done by a crash between approving a
    report and closing the other reports on the same post.
    """
    db = SessionLocal()
    try:
        reconciled = ReportService(db).reconcile_pending_cascades()
        if reconciled:
            logger.info(f"Reconciled {reconciled} report(s) from pending cascades")
    except Exception as e:
        logger.error(f"Error during cascade reconciliation: {e}")
    finally:
        db.close()


def start_scheduler():
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        dispatch_notifications,
        trigger=IntervalTrigger(seconds=settings.notification_dispatch_interval),
        id="notification_dispatch",
        name="Send queued notification emails",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        reconcile_report_cascades,
        trigger=IntervalTrigger(seconds=settings.moderation_reconcile_interval),
        id="report_cascade_reconcile",
        name="Reconcile pending report cascades",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    logger.info("Scheduler started. Notification dispatch and cascade reconcile scheduled.")

    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler):
    if scheduler:
        scheduler.shutdown()
        logger.info("Scheduler shut down.")
