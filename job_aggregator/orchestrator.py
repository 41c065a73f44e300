"""Aggregation orchestrator: run sources, then date filter, link check and dedup."""

from __future__ import annotations

from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import timedelta
import time
from typing import Callable, Sequence

import structlog

from .config import GlobalConfig
from .engine import DeduplicationEngine, LinkVerifier, ThreadPoolManager, filter_by_age
from .errors import AggregationOutage, SourceFailure
from .extractors import SourceExtractor
from .health import HealthMonitor
from .logging_conf import configure_logging
from .models import Listing, SourceIdentity


@dataclass(slots=True)
class SourceOutcome:
    """Result of one extractor run inside the failure boundary."""

    source: SourceIdentity
    listings: list[Listing] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class AggregationSummary:
    sources_ok: int = 0
    sources_failed: int = 0
    sources_skipped: int = 0
    collected: int = 0
    after_date_filter: int = 0
    after_dedup: int = 0
    failed_sources: list[str] = field(default_factory=list)

    @property
    def outage(self) -> bool:
        """True when sources ran and none of them succeeded."""

        return self.sources_ok == 0 and self.sources_failed > 0


class Orchestrator:
    """Drive every configured extractor and post-process their combined output."""

    def __init__(
        self,
        extractors: Sequence[SourceExtractor],
        health: HealthMonitor,
        global_config: GlobalConfig | None = None,
        *,
        link_verifier: LinkVerifier | None = None,
        dedup: DeduplicationEngine | None = None,
        thread_pool: ThreadPoolManager | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.extractors = list(extractors)
        self.health = health
        self.global_config = global_config or GlobalConfig()
        self.link_verifier = link_verifier
        self.dedup = dedup or DeduplicationEngine(self.global_config.deduplication)
        self.thread_pool = thread_pool or ThreadPoolManager(
            default_workers=self.global_config.max_concurrent_sources
        )
        self.logger = (logger or configure_logging()).bind(component="orchestrator")
        self.last_summary = AggregationSummary()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def aggregate(self) -> list[Listing]:
        """Collect, filter, verify and de-duplicate listings from all sources.

        Never raises: a failing source is recorded in the health monitor and
        skipped, and a failing post-processing stage passes its input through.
        """

        listings, _ = self._aggregate()
        return listings

    def refresh_listings(self) -> list[Listing]:
        """Cache compute. Same as ``aggregate``, but a run in which every
        enabled source failed raises ``AggregationOutage`` instead of
        returning an empty list, so the cache keeps its previous entry.
        """

        listings, summary = self._aggregate()
        if summary.outage:
            raise AggregationOutage(summary.failed_sources)
        return listings

    def _aggregate(self) -> tuple[list[Listing], AggregationSummary]:
        summary = AggregationSummary()
        started = time.monotonic()
        enabled = []
        for extractor in self.extractors:
            if self._is_enabled(extractor):
                enabled.append(extractor)
            else:
                summary.sources_skipped += 1

        if self.global_config.parallel_sources and len(enabled) > 1:
            outcomes = self._run_parallel(enabled)
        else:
            outcomes = [self._run_extractor(extractor) for extractor in enabled]

        collected: list[Listing] = []
        for outcome in outcomes:
            self._record(outcome)
            if outcome.ok:
                summary.sources_ok += 1
                collected.extend(outcome.listings)
            else:
                summary.sources_failed += 1
                summary.failed_sources.append(outcome.source.value)
        summary.collected = len(collected)

        listings = self._stage("date_filter", self._apply_date_filter, collected)
        summary.after_date_filter = len(listings)
        listings = self._stage("link_verification", self._apply_link_verification, listings)
        listings = self._stage("deduplication", self.dedup.remove_duplicates, listings)
        summary.after_dedup = len(listings)

        self.last_summary = summary
        self.logger.info(
            "aggregate_completed",
            sources_ok=summary.sources_ok,
            sources_failed=summary.sources_failed,
            sources_skipped=summary.sources_skipped,
            collected=summary.collected,
            after_date_filter=summary.after_date_filter,
            unique=summary.after_dedup,
            duration_s=round(time.monotonic() - started, 2),
        )
        return listings, summary

    def scrape_source(self, source: SourceIdentity | str) -> list[Listing]:
        """Run one source on its own; returns ``[]`` when unknown, disabled or failed."""

        try:
            identity = SourceIdentity.parse(source)
        except ValueError:
            self.logger.warning("unknown_source", source=str(source))
            return []
        extractor = next((item for item in self.extractors if item.identity is identity), None)
        if extractor is None or not self._is_enabled(extractor):
            self.logger.info("source_not_runnable", source=identity.value)
            return []
        outcome = self._run_extractor(extractor)
        self._record(outcome)
        return outcome.listings

    def shutdown(self) -> None:
        self.thread_pool.shutdown()

    # ------------------------------------------------------------------
    # Source execution
    # ------------------------------------------------------------------
    def _is_enabled(self, extractor: SourceExtractor) -> bool:
        try:
            return bool(extractor.is_enabled())
        except Exception as exc:  # noqa: BLE001
            self.logger.error("enabled_check_failed", source=extractor.identity.value, error=str(exc))
            return False

    def _run_extractor(self, extractor: SourceExtractor) -> SourceOutcome:
        identity = extractor.identity
        started = time.monotonic()
        try:
            listings = list(extractor.scrape_jobs())
        except Exception as exc:  # noqa: BLE001
            failure = SourceFailure(identity.value, exc)
            self.logger.error(
                "source_failed",
                source=identity.value,
                portal=extractor.portal_name(),
                error=str(exc),
            )
            return SourceOutcome(source=identity, error=failure)
        self.logger.info(
            "source_completed",
            source=identity.value,
            listings=len(listings),
            duration_s=round(time.monotonic() - started, 2),
        )
        return SourceOutcome(source=identity, listings=listings)

    def _run_parallel(self, extractors: Sequence[SourceExtractor]) -> list[SourceOutcome]:
        executor = self.thread_pool.get("sources", self.global_config.max_concurrent_sources)
        futures: list[Future[SourceOutcome]] = [
            executor.submit(self._run_extractor, extractor) for extractor in extractors
        ]
        timeout = self.global_config.source_timeout
        deadline = time.monotonic() + timeout if timeout else None

        outcomes: list[SourceOutcome] = []
        for extractor, future in zip(extractors, futures):
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                outcomes.append(future.result(timeout=remaining))
            except FutureTimeoutError:
                future.cancel()
                self.logger.error("source_timed_out", source=extractor.identity.value, timeout_s=timeout)
                outcomes.append(
                    SourceOutcome(
                        source=extractor.identity,
                        error=SourceFailure(extractor.identity.value, TimeoutError("timed out")),
                    )
                )
        return outcomes

    def _record(self, outcome: SourceOutcome) -> None:
        if outcome.ok:
            self.health.record_success(outcome.source, len(outcome.listings))
            complete = sum(1 for listing in outcome.listings if listing.is_complete())
            self.health.record_data_quality(outcome.source, len(outcome.listings), complete)
        else:
            cause = outcome.error.cause if isinstance(outcome.error, SourceFailure) else outcome.error
            self.health.record_failure(outcome.source, cause)

    # ------------------------------------------------------------------
    # Post-processing stages
    # ------------------------------------------------------------------
    def _stage(
        self,
        name: str,
        func: Callable[[list[Listing]], list[Listing]],
        listings: list[Listing],
    ) -> list[Listing]:
        try:
            return list(func(listings))
        except Exception as exc:  # noqa: BLE001
            self.logger.error("stage_failed", stage=name, error=str(exc))
            return listings

    def _apply_date_filter(self, listings: list[Listing]) -> list[Listing]:
        overrides: dict[SourceIdentity, timedelta] = {}
        for extractor in self.extractors:
            config = getattr(extractor, "config", None)
            if config is not None:
                overrides[extractor.identity] = timedelta(days=config.max_age_days)
        return filter_by_age(
            listings,
            timedelta(days=self.global_config.max_age_days),
            overrides=overrides,
            include_undated=self.global_config.include_undated,
        )

    def _apply_link_verification(self, listings: list[Listing]) -> list[Listing]:
        if self.link_verifier is None or not self.global_config.link_verification.enabled:
            return listings
        return self.link_verifier.verify(listings)


__all__ = ["AggregationSummary", "Orchestrator", "SourceOutcome"]
