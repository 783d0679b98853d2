"""
Background job definitions using APScheduler.

Jobs include:
- Nightly commission sweep for the current month
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.config import settings
from src.services.recalculation import get_coordinator
from src.utils.months import current_month

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler(timezone="UTC")


async def commission_sweep_job():
    """Recalculate every sales and dispatch commission for the current month."""
    month = current_month()
    logger.debug(f"Running commission sweep for {month}")
    try:
        batch = await get_coordinator().calculate_all(month)
        if batch.failed_user_ids:
            logger.warning(
                f"Commission sweep job: {len(batch.failed_user_ids)} users failed "
                f"({batch.failed_user_ids})"
            )
    except Exception as e:
        logger.error(f"Commission sweep job error: {e}")


def setup_scheduler():
    """
    Configure and add all scheduled jobs.

    Called during application startup.
    """
    # Commission sweep - daily
    scheduler.add_job(
        commission_sweep_job,
        trigger=CronTrigger(hour=settings.commission_sweep_hour, minute=0),
        id="commission_sweep",
        name="Recalculate monthly commissions",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    logger.info("Scheduler configured with jobs")
