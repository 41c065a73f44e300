"""Scheduling helpers."""

from .apsched_adapter import APSchedulerAdapter, refresh_job_id

__all__ = ["APSchedulerAdapter", "refresh_job_id"]
