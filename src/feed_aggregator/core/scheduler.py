"""
Prewarm scheduler refreshing every group's cached result.

Uses APScheduler to run the refresh periodically in a background thread.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, JobEvent
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from feed_aggregator.config import SchedulerConfig
from feed_aggregator.core.services import GroupFeedService
from feed_aggregator.logger import get_logger

logger = get_logger(__name__)

PREWARM_JOB_ID = "prewarm_groups"


@dataclass
class PrewarmReport:
    """Outcome of one prewarm pass."""

    started_at: datetime
    refreshed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def total_groups(self) -> int:
        return len(self.refreshed) + len(self.failed)


@dataclass
class SchedulerStats:
    """Statistics for prewarm runs."""

    total_runs: int = 0
    groups_refreshed: int = 0
    group_failures: int = 0
    last_run_time: Optional[datetime] = None
    last_report: Optional[PrewarmReport] = None
    uptime_seconds: float = 0.0


class PrewarmScheduler:
    """Periodically aggregates every configured group into the cache."""

    def __init__(
        self,
        service: GroupFeedService,
        interval_minutes: int = 15,
        prewarm_limit: int = 100,
        timezone: str = "UTC",
        max_workers: int = 1,
    ):
        """Initialize the scheduler.

        Args:
            service: GroupFeedService used to refresh groups
            interval_minutes: Minutes between prewarm passes
            prewarm_limit: Item limit for prewarmed results
            timezone: Scheduler timezone
            max_workers: Maximum number of concurrent worker threads
        """
        self.service = service
        self.interval_minutes = interval_minutes
        self.prewarm_limit = prewarm_limit
        self.max_workers = max_workers

        self.scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=max_workers)},
            timezone=timezone,
        )

        self.stats = SchedulerStats()
        self.start_time: Optional[datetime] = None

        self.scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)

    def start(self) -> None:
        """Start the scheduler and register the prewarm job."""
        if self.scheduler.running:
            logger.warning("Scheduler is already running")
            return

        self.scheduler.add_job(
            func=self.run_once,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=PREWARM_JOB_ID,
            name="Prewarm group caches",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.start()
        self.start_time = datetime.now()
        logger.info(f"Prewarm scheduler started (every {self.interval_minutes} minutes)")

    def stop(self, wait: bool = True) -> None:
        """Stop the scheduler.

        Args:
            wait: Whether to wait for a running pass to complete
        """
        if not self.scheduler.running:
            logger.warning("Scheduler is not running")
            return

        self.scheduler.shutdown(wait=wait)
        if self.start_time:
            self.stats.uptime_seconds = (datetime.now() - self.start_time).total_seconds()
        logger.info("Prewarm scheduler stopped")

    def is_running(self) -> bool:
        return self.scheduler.running

    def next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(PREWARM_JOB_ID)
        return job.next_run_time if job else None

    def run_once(self) -> PrewarmReport:
        """Refresh every configured group.

        Failures are logged per group and never raised.

        Returns:
            PrewarmReport for this pass
        """
        report = PrewarmReport(started_at=datetime.now())

        try:
            groups = self.service.list_groups()
        except Exception as e:
            logger.exception(f"Prewarm could not read group config: {e}")
            groups = []

        for group in groups:
            try:
                self.service.refresh_group(group, self.prewarm_limit)
                report.refreshed.append(group)
            except Exception as e:
                report.failed[group] = f"{type(e).__name__}: {e}"
                logger.error(f"Prewarm failed for group {group!r}: {report.failed[group]}")

        self.stats.total_runs += 1
        self.stats.groups_refreshed += len(report.refreshed)
        self.stats.group_failures += len(report.failed)
        self.stats.last_run_time = report.started_at
        self.stats.last_report = report

        logger.info(
            f"Prewarm pass done: {len(report.refreshed)}/{report.total_groups} groups refreshed"
        )
        return report

    def _on_job_error(self, event: JobEvent) -> None:
        """Handle job error event.

        Args:
            event: Job event
        """
        if event.exception:
            logger.error(f"Job {event.job_id} failed: {type(event.exception).__name__}: {event.exception}")


def create_scheduler(service: GroupFeedService, scheduler_config: SchedulerConfig) -> PrewarmScheduler:
    """Create a PrewarmScheduler from configuration.

    Args:
        service: GroupFeedService used to refresh groups
        scheduler_config: Scheduler section of the configuration

    Returns:
        Configured PrewarmScheduler instance
    """
    return PrewarmScheduler(
        service,
        interval_minutes=scheduler_config.interval_minutes,
        prewarm_limit=scheduler_config.prewarm_limit,
        timezone=scheduler_config.timezone,
        max_workers=scheduler_config.max_workers,
    )
