from __future__ import annotations

import structlog

from job_aggregator.config import HealthConfig
from job_aggregator.health import HealthMonitor
from job_aggregator.models import HealthStatus, SourceIdentity


def make_monitor(**overrides) -> HealthMonitor:
    return HealthMonitor(HealthConfig(**overrides), logger=structlog.get_logger("test"))


def test_unknown_until_recorded() -> None:
    monitor = make_monitor()
    record = monitor.get_health(SourceIdentity.SHINE)
    assert record.status is HealthStatus.UNKNOWN
    assert monitor.get_all_health() == {}


def test_three_failures_then_one_success() -> None:
    monitor = make_monitor()
    monitor.record_success("indeed", 10)
    for _ in range(2):
        monitor.record_failure("indeed", RuntimeError("timeout"))
    assert monitor.get_health("indeed").status is HealthStatus.DEGRADED

    monitor.record_failure("indeed", RuntimeError("timeout"))
    record = monitor.get_health("indeed")
    assert record.status is HealthStatus.FAILING
    assert record.consecutive_failures == 3
    assert record.last_error == "timeout"

    monitor.record_success("indeed", 9)
    record = monitor.get_health("indeed")
    assert record.status is HealthStatus.HEALTHY
    assert record.consecutive_failures == 0
    assert record.last_error is None
    assert record.success_count == 2
    assert record.failure_count == 3


def test_failure_without_prior_success_is_failing() -> None:
    monitor = make_monitor()
    record = monitor.record_failure(SourceIdentity.NAUKRI, "HTTP 500")
    assert record.status is HealthStatus.FAILING
    assert record.consecutive_failures == 1


def test_zero_jobs_is_failing() -> None:
    monitor = make_monitor()
    assert monitor.record_success("glassdoor", 0).status is HealthStatus.FAILING


def test_sharp_drop_is_degraded() -> None:
    monitor = make_monitor()
    monitor.record_success("cutshort", 40)
    monitor.record_success("cutshort", 40)
    assert monitor.record_success("cutshort", 10).status is HealthStatus.DEGRADED
    assert monitor.record_success("cutshort", 30).status is HealthStatus.HEALTHY


def test_failure_threshold_is_configurable() -> None:
    monitor = make_monitor(failure_threshold=5)
    monitor.record_success("hirist", 5)
    for _ in range(4):
        monitor.record_failure("hirist", "boom")
    assert monitor.get_health("hirist").status is HealthStatus.DEGRADED
    monitor.record_failure("hirist", "boom")
    assert monitor.get_health("hirist").status is HealthStatus.FAILING


def test_data_quality_alert(monkeypatch) -> None:
    monitor = make_monitor()
    events: list[tuple[str, dict]] = []

    class RecordingLogger:
        def warning(self, event, **kwargs):
            events.append((event, kwargs))

        def info(self, event, **kwargs):  # noqa: ARG002
            return None

    monkeypatch.setattr(monitor, "logger", RecordingLogger())
    monitor.record_data_quality("jobsora", total=10, complete=9)
    assert events == []
    monitor.record_data_quality("jobsora", total=10, complete=5)
    assert events[0][0] == "data_quality_alert"
    assert events[0][1]["completeness"] == 0.5
    assert monitor.get_health("jobsora").completeness == 0.7


def test_returned_records_are_copies() -> None:
    monitor = make_monitor()
    monitor.record_success("wellfound", 3)
    record = monitor.get_health("wellfound")
    record.consecutive_failures = 99
    record.recent_job_counts.append(1000)
    fresh = monitor.get_health("wellfound")
    assert fresh.consecutive_failures == 0
    assert list(fresh.recent_job_counts) == [3]


def test_summary_counts_statuses() -> None:
    monitor = make_monitor()
    monitor.record_success("indeed", 5)
    monitor.record_failure("naukri", "down")
    monitor.record_success("shine", 0)
    summary = monitor.summary()
    assert summary["total"] == 3
    assert summary["healthy"] == 1
    assert summary["failing"] == 2
    assert summary["degraded"] == 0
    assert summary["sources"]["indeed"]["last_job_count"] == 5
    assert summary["sources"]["naukri"]["last_success"] is None
