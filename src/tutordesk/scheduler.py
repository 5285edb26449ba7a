"""Nightly TOP 3 archival on a cron schedule."""

import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Config, load_config, today_for
from .workflows import run_archival

logger = logging.getLogger(__name__)


def archive_job(config: Config) -> None:
    """Archive expired TOP 3 entries for the current local day."""
    today = today_for(config)
    logger.info(f"Running scheduled archival for {today}")
    try:
        result = run_archival(config, today)
    except OSError as e:
        logger.error(f"Scheduled archival failed: {e}")
        return
    if result.archived:
        logger.info(f"Archived {len(result.archived)} TOP 3 item(s)")


def setup_scheduler(config: Config | None = None) -> BlockingScheduler:
    """Set up the archival job at ARCHIVE_TIME in the configured timezone."""
    if config is None:
        config = load_config()

    scheduler = BlockingScheduler(timezone=config.timezone or "Asia/Seoul")

    try:
        hour, minute = map(int, config.archive_time.split(":"))
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError(config.archive_time)
    except ValueError:
        logger.warning(f"Invalid archive time format: {config.archive_time}, using 00:05")
        hour, minute = 0, 5

    scheduler.add_job(
        archive_job,
        CronTrigger(hour=hour, minute=minute, timezone=config.timezone or "Asia/Seoul"),
        args=[config],
        id="top3_archival",
        replace_existing=True,
    )
    logger.info(f"Scheduled TOP 3 archival at {hour:02d}:{minute:02d} ({config.timezone})")
    return scheduler


def run_scheduler(config: Config | None = None) -> None:
    """Run the archival scheduler until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = config or load_config()
    scheduler = setup_scheduler(config)

    # Catch up on anything left over from before the scheduler started
    archive_job(config)

    logger.info("Starting Tutordesk archival scheduler...")
    scheduler.start()
