"""
Resolution Scheduler

One-shot scheduled resolutions on an APScheduler BackgroundScheduler.
Each market has at most one pending job (``resolve:<market_id>``);
scheduling again replaces it. Cancelling removes a pending job only: a
resolution that has started runs to completion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from core.schemas.errors import OracleException

logger = logging.getLogger(__name__)

JOB_PREFIX = "resolve:"


@dataclass
class ScheduledResolution:
    market_id: str
    job_id: str
    run_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "market_id": self.market_id,
            "job_id": self.job_id,
            "run_at": self.run_at.isoformat(),
        }


class ResolutionScheduler:
    """
    Schedules ``resolve_fn(market_id)`` to run at a given time.
    """

    def __init__(
        self,
        resolve_fn: Callable[[str], Any],
        scheduler: Optional[BackgroundScheduler] = None,
    ) -> None:
        self.resolve_fn = resolve_fn
        self.scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)
        self.scheduler.add_listener(self._on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Resolution scheduler started")

    def shutdown(self, wait: bool = False) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Resolution scheduler stopped")

    def schedule(
        self,
        market_id: str,
        *,
        run_at: Optional[datetime] = None,
        delay_s: Optional[float] = None,
    ) -> ScheduledResolution:
        """Schedule a resolution at ``run_at`` or ``delay_s`` seconds from now."""
        if run_at is None:
            run_at = datetime.now(timezone.utc) + timedelta(seconds=delay_s or 0)
        elif run_at.tzinfo is None:
            run_at = run_at.replace(tzinfo=timezone.utc)

        job_id = JOB_PREFIX + market_id
        self.scheduler.add_job(
            func=self.run_now,
            trigger=DateTrigger(run_date=run_at),
            args=[market_id],
            id=job_id,
            name=f"Resolve {market_id}",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=None,
        )
        logger.info("Scheduled resolution of %s at %s", market_id, run_at.isoformat())
        return ScheduledResolution(market_id=market_id, job_id=job_id, run_at=run_at)

    def cancel(self, market_id: str) -> bool:
        """Remove a pending job. False when nothing was pending."""
        try:
            self.scheduler.remove_job(JOB_PREFIX + market_id)
        except JobLookupError:
            return False
        logger.info("Cancelled scheduled resolution of %s", market_id)
        return True

    def pending(self) -> list[ScheduledResolution]:
        scheduled = []
        for job in self.scheduler.get_jobs():
            if not job.id.startswith(JOB_PREFIX):
                continue
            run_at = getattr(job, "next_run_time", None) or job.trigger.run_date
            scheduled.append(
                ScheduledResolution(market_id=job.args[0], job_id=job.id, run_at=run_at)
            )
        return sorted(scheduled, key=lambda s: s.run_at)

    def is_pending(self, market_id: str) -> bool:
        return self.scheduler.get_job(JOB_PREFIX + market_id) is not None

    def run_now(self, market_id: str) -> Any:
        """Job body. Market conflicts are logged, not raised into the scheduler."""
        logger.info("Running scheduled resolution of %s", market_id)
        try:
            return self.resolve_fn(market_id)
        except OracleException as e:
            logger.warning("Scheduled resolution of %s skipped: %s", market_id, e.message)
            return None

    def _on_job_event(self, event: JobExecutionEvent) -> None:
        if event.exception:
            logger.error("Scheduled job %s failed: %s", event.job_id, event.exception)
        else:
            logger.debug("Scheduled job %s finished", event.job_id)
