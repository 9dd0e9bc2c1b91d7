"""
Background job definitions using APScheduler.

Jobs include:
- Daily credit window notification
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.config import settings
from src.db import get_db_context
from src.services.alerts import record_credit_notification

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def credit_notification_job():
    """Log alerts for credit windows that are closing or closed."""
    logger.debug("Running credit notification job")
    try:
        async with get_db_context() as db:
            alerts, summary = await record_credit_notification(
                db,
                datetime.now(timezone.utc),
                settings.alert_horizon_days,
            )
            if alerts:
                logger.info(
                    f"Credit notification job: {summary['total']} alerts, "
                    f"{summary['critical']} critical"
                )
    except Exception as e:
        logger.error(f"Credit notification job error: {e}")


def setup_scheduler():
    """
    Configure and add all scheduled jobs.

    Called during application startup.
    """
    scheduler.add_job(
        credit_notification_job,
        trigger=CronTrigger(
            hour=settings.credit_notification_hour,
            minute=0,
            timezone=settings.scheduler_timezone,
        ),
        id="credit_notification",
        name="Daily credit window notification",
        replace_existing=True,
    )

    logger.info("Scheduler configured with jobs")
