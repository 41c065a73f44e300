"""APScheduler wrapper exposing the refresh-job helpers the cache needs."""

from __future__ import annotations

from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..logging_conf import configure_logging


def refresh_job_id(name: str) -> str:
    return f"refresh::{name}"


class APSchedulerAdapter:
    """Own one background scheduler with at most one running job per cache."""

    def __init__(self) -> None:
        self.scheduler = BackgroundScheduler()
        self.logger = configure_logging().bind(component="scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_refresh(
        self, name: str, callback: Callable[[], None], interval_seconds: float
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        trigger = self._build_trigger(interval_seconds)
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=refresh_job_id(name),
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.logger.info("job_scheduled", cache=name, interval_s=interval_seconds)

    def remove(self, name: str) -> None:
        try:
            self.scheduler.remove_job(refresh_job_id(name))
        except Exception:  # noqa: BLE001
            self.logger.warning("job_remove_failed", cache=name)

    @staticmethod
    def _build_trigger(interval_seconds: float) -> IntervalTrigger:
        return IntervalTrigger(seconds=float(interval_seconds))

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": getattr(job, "next_run_time", None),
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["APSchedulerAdapter", "refresh_job_id"]
