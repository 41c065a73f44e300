from __future__ import annotations

import threading
from datetime import timedelta

import structlog

from job_aggregator.config import GlobalConfig, LinkVerificationConfig
from job_aggregator.errors import FetchFailure
from job_aggregator.health import HealthMonitor
from job_aggregator.models import HealthStatus, SourceIdentity, utcnow
from job_aggregator.orchestrator import Orchestrator


class FakeExtractor:
    def __init__(self, identity, result=None, error=None, enabled=True, gate=None) -> None:
        self.identity = identity
        self.result = result or []
        self.error = error
        self.enabled = enabled
        self.gate = gate
        self.calls = 0

    def scrape_jobs(self):
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return list(self.result)

    def portal_name(self) -> str:
        return self.identity.value.title()

    def is_enabled(self) -> bool:
        return self.enabled

    def request_delay(self) -> float:
        return 0.0


def make_orchestrator(extractors, **config) -> Orchestrator:
    config.setdefault("parallel_sources", False)
    config.setdefault("link_verification", LinkVerificationConfig(enabled=False))
    health = HealthMonitor(logger=structlog.get_logger("test"))
    return Orchestrator(
        extractors,
        health,
        GlobalConfig(**config),
        logger=structlog.get_logger("test"),
    )


def test_failing_source_does_not_block_others(make_listing) -> None:
    good = FakeExtractor(SourceIdentity.INDEED, [make_listing() for _ in range(5)])
    bad = FakeExtractor(
        SourceIdentity.NAUKRI,
        error=FetchFailure("https://www.naukri.com/x", "HTTP 503", status_code=503),
    )
    orchestrator = make_orchestrator([good, bad])

    result = orchestrator.aggregate()

    assert len(result) == 5
    indeed = orchestrator.health.get_health(SourceIdentity.INDEED)
    naukri = orchestrator.health.get_health(SourceIdentity.NAUKRI)
    assert indeed.status is HealthStatus.HEALTHY
    assert indeed.last_job_count == 5
    assert naukri.status is HealthStatus.FAILING
    assert naukri.consecutive_failures == 1
    assert orchestrator.last_summary.sources_failed == 1


def test_parallel_mode_gives_same_result(make_listing) -> None:
    good = FakeExtractor(SourceIdentity.INDEED, [make_listing() for _ in range(5)])
    other = FakeExtractor(SourceIdentity.SHINE, [make_listing(source=SourceIdentity.SHINE)])
    bad = FakeExtractor(SourceIdentity.NAUKRI, error=RuntimeError("boom"))
    orchestrator = make_orchestrator([good, bad, other], parallel_sources=True)

    result = orchestrator.aggregate()
    orchestrator.shutdown()

    assert len(result) == 6
    assert [item.source for item in result][-1] is SourceIdentity.SHINE
    assert orchestrator.health.get_health("naukri").status is HealthStatus.FAILING


def test_source_timeout_records_failure(make_listing) -> None:
    gate = threading.Event()
    slow = FakeExtractor(SourceIdentity.LINKEDIN, [make_listing()], gate=gate)
    fast = FakeExtractor(SourceIdentity.INDEED, [make_listing()])
    orchestrator = make_orchestrator([fast, slow], parallel_sources=True, source_timeout=0.2)

    result = orchestrator.aggregate()
    gate.set()
    orchestrator.shutdown()

    assert len(result) == 1
    record = orchestrator.health.get_health("linkedin")
    assert record.status is HealthStatus.FAILING
    assert "timed out" in record.last_error


def test_disabled_sources_are_skipped(make_listing) -> None:
    disabled = FakeExtractor(SourceIdentity.HIRIST, [make_listing()], enabled=False)
    orchestrator = make_orchestrator([disabled])
    assert orchestrator.aggregate() == []
    assert disabled.calls == 0
    assert orchestrator.health.get_all_health() == {}
    assert orchestrator.last_summary.sources_skipped == 1


def test_pipeline_filters_then_dedups(make_listing) -> None:
    now = utcnow()
    listings = [
        make_listing(title="Software Engineer", company="Acme", posted_at=now - timedelta(days=1)),
        make_listing(title="Software Engineer", company="ACME", posted_at=now - timedelta(days=2)),
        make_listing(title="Old Role", company="Stale", posted_at=now - timedelta(days=30)),
        make_listing(title="Undated Role", company="Mystery", posted_at=None),
    ]
    orchestrator = make_orchestrator([FakeExtractor(SourceIdentity.INDEED, listings)])
    result = orchestrator.aggregate()

    assert [item.title for item in result] == ["Software Engineer", "Undated Role"]
    assert result[0].company == "Acme"
    assert orchestrator.last_summary.collected == 4
    assert orchestrator.last_summary.after_date_filter == 3
    assert orchestrator.last_summary.after_dedup == 2


def test_failing_stage_passes_input_through(make_listing) -> None:
    listings = [make_listing(), make_listing()]
    orchestrator = make_orchestrator([FakeExtractor(SourceIdentity.INDEED, listings)])

    class BrokenVerifier:
        def verify(self, _listings):
            raise RuntimeError("verifier crashed")

    orchestrator.link_verifier = BrokenVerifier()
    orchestrator.global_config.link_verification.enabled = True

    assert orchestrator.aggregate() == listings


def test_link_verification_runs_between_filter_and_dedup(make_listing) -> None:
    listings = [make_listing(), make_listing()]
    orchestrator = make_orchestrator(
        [FakeExtractor(SourceIdentity.INDEED, listings)],
        link_verification=LinkVerificationConfig(enabled=True),
    )
    seen: list[int] = []

    class RecordingVerifier:
        def verify(self, items):
            seen.append(len(items))
            return items

    orchestrator.link_verifier = RecordingVerifier()
    orchestrator.aggregate()
    assert seen == [2]


def test_scrape_source_runs_one_source(make_listing) -> None:
    indeed = FakeExtractor(SourceIdentity.INDEED, [make_listing()])
    shine = FakeExtractor(SourceIdentity.SHINE, error=RuntimeError("down"))
    orchestrator = make_orchestrator([indeed, shine])

    assert len(orchestrator.scrape_source("indeed")) == 1
    assert orchestrator.scrape_source("shine") == []
    assert orchestrator.scrape_source("monster") == []
    assert orchestrator.scrape_source("naukri") == []
    assert orchestrator.health.get_health("shine").status is HealthStatus.FAILING
    assert indeed.calls == 1
