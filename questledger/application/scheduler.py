"""
Background scheduler - periodic jobs next to the interactive store.

Jobs:
  - Badge check (every BADGE_CHECK_INTERVAL_SECONDS)
  - Day rollover: streak and daily quests (every minute)
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler

from questledger.application.store import BudgetStore

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True)


def _run_badge_check(store: BudgetStore):
    try:
        store.check_and_award_badges()
    except Exception:
        logger.exception("Badge check job failed")


def _run_day_rollover(store: BudgetStore):
    try:
        store.refresh_daily_quests()
    except Exception:
        logger.exception("Daily quest refresh job failed")


def start_scheduler(store: BudgetStore, interval_seconds: int | None = None):
    """Start the background scheduler with all periodic jobs."""
    interval = interval_seconds or store.settings.BADGE_CHECK_INTERVAL_SECONDS

    scheduler.add_job(
        _run_badge_check,
        "interval",
        seconds=interval,
        args=[store],
        id="badge_check",
        replace_existing=True,
    )

    # Daily quests expire at local midnight
    scheduler.add_job(
        _run_day_rollover,
        "interval",
        minutes=1,
        args=[store],
        id="day_rollover",
        replace_existing=True,
    )

    if not scheduler.running:
        scheduler.start()
    logger.info("Scheduler started (badge check every %ds)", interval)


def shutdown_scheduler():
    """Gracefully shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
