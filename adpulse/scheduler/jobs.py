"""ADPULSE — Scheduler Jobs.

APScheduler daily job that fetches and saves yesterday's hourly ad data.
"""

from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from adpulse.config import settings
from adpulse.analyzer.pipeline import fetch_ad_data
from adpulse.connectors.meta.client import MetaClient
from adpulse.core.errors import FetchError
from adpulse.core.logging import get_logger
from adpulse.storage import save_output

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


def _yesterday() -> str:
    return (datetime.now(timezone.utc).date() - timedelta(days=1)).strftime("%Y-%m-%d")


async def daily_fetch_job():
    """Fetch and save yesterday's hourly ad data."""
    date = _yesterday()
    logger.info(f"Scheduled fetch for {date} starting...")
    client = MetaClient()
    try:
        output = await fetch_ad_data(client, date)
        path = save_output(output, date, client.ad_account_id)
        logger.info(f"Scheduled fetch complete: {output.metadata.total_records} records → {path}")
    except FetchError as e:
        logger.error(f"Scheduled fetch failed: {e}")
    finally:
        await client.close()


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        daily_fetch_job,
        "cron",
        hour=settings.fetch_hour,
        minute=0,
        id="daily_fetch",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Daily fetch at {settings.fetch_hour}:00 UTC")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
