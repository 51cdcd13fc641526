"""Background scheduler for periodic sync"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

JOB_ID = "sync_run"


class SyncScheduler:
    """Scheduler for periodic issue synchronization.

    ``run_sync`` performs one complete run and returns its stats. Runs never
    overlap: a run still in progress when the next one is due is skipped.
    """

    def __init__(self, run_sync: Callable[[], Dict[str, Any]]):
        self.scheduler = BackgroundScheduler()
        self.run_sync = run_sync
        self.last_result: Optional[Dict[str, Any]] = None

    def start(self, interval_minutes: int):
        """Start the scheduler and schedule the sync job"""
        self.scheduler.start()
        logger.info("Sync scheduler started")
        self.schedule(interval_minutes)

    def stop(self):
        """Stop the scheduler, waiting for a running sync to finish"""
        self.scheduler.shutdown(wait=True)
        logger.info("Sync scheduler stopped")

    def schedule(self, interval_minutes: int, run_now: bool = True):
        """Schedule the sync job, replacing an existing one"""
        if interval_minutes < 1:
            raise ValueError(f"Sync interval must be at least one minute, got {interval_minutes}")

        existing = self.scheduler.get_job(JOB_ID)
        if existing is not None:
            self.scheduler.remove_job(JOB_ID)

        job_kwargs = {}
        if run_now:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            func=self._sync_job,
            trigger=IntervalTrigger(minutes=interval_minutes),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **job_kwargs,
        )
        logger.info(f"Scheduled sync every {interval_minutes} minutes")

    def unschedule(self):
        """Remove the sync job"""
        try:
            if self.scheduler.get_job(JOB_ID) is not None:
                self.scheduler.remove_job(JOB_ID)
            logger.info("Unscheduled sync")
        except Exception as e:
            logger.error(f"Failed to unschedule sync: {e}")

    def _sync_job(self):
        """Job function running one sync"""
        try:
            logger.info("Running scheduled sync")
            result = self.run_sync()
            self.last_result = {"status": "success", "stats": result}
            logger.info(f"Scheduled sync completed: {len(result.get('warnings', []))} warnings")
        except Exception as e:
            logger.error(f"Scheduled sync failed: {e}")
            self.last_result = {"status": "failed", "error": str(e)}
