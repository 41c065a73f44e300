"""Read API wiring config, extractors, orchestrator, health and cache together."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .cache import CacheManager
from .config import ConfigRepository, GlobalConfig
from .engine import (
    DeduplicationEngine,
    Fetcher,
    LinkVerifier,
    ThreadPoolManager,
    filter_last_24_hours,
    filter_last_week_excluding_24_hours,
)
from .extractors import build_extractors
from .health import HealthMonitor
from .logging_conf import configure_logging
from .models import CacheEntry, CacheSnapshot, Listing
from .orchestrator import Orchestrator
from .scheduler import APSchedulerAdapter


@dataclass
class AggregatorService:
    """Facade handed to callers; every component is created once and shared."""

    repository: ConfigRepository
    global_config: GlobalConfig
    fetcher: Fetcher
    health_monitor: HealthMonitor
    orchestrator: Orchestrator
    cache: CacheManager
    scheduler: APSchedulerAdapter
    link_verifier: LinkVerifier | None = None

    def aggregate(self) -> tuple[Listing, ...]:
        return self.cache.get_aggregate()

    def snapshot(self) -> CacheSnapshot:
        return self.cache.snapshot()

    def health(self) -> dict[str, dict[str, Any]]:
        return {
            identity.value: record.to_dict()
            for identity, record in self.health_monitor.get_all_health().items()
        }

    def health_summary(self) -> dict[str, Any]:
        return self.health_monitor.summary()

    def fresh_24h(self) -> list[Listing]:
        return filter_last_24_hours(self.cache.get_aggregate())

    def weekly(self) -> list[Listing]:
        return filter_last_week_excluding_24_hours(self.cache.get_aggregate())

    def refresh_now(self) -> CacheEntry:
        """Admin trigger; raises ``CacheComputeFailure`` when the refresh fails."""

        return self.cache.refresh()

    def scrape_source(self, name: str) -> list[Listing]:
        return self.orchestrator.scrape_source(name)

    def duplicate_groups(self, listings: list[Listing]) -> dict[str, list[Listing]]:
        """Bucket raw listings into near-duplicate clusters, keyed by title|company."""

        return self.orchestrator.dedup.group_similar(listings)

    def start(self) -> None:
        self.scheduler.start()
        self.cache.start(self.scheduler)

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        self.orchestrator.shutdown()
        if self.link_verifier is not None:
            self.link_verifier.shutdown()
        self.fetcher.close()


def build_service(
    repository: ConfigRepository | None = None,
    verbose: bool = False,
) -> AggregatorService:
    logger = configure_logging(verbose=verbose)
    repository = repository or ConfigRepository()
    global_config = repository.load_global_config()

    fetcher = Fetcher(global_config, logger=logger.bind(component="fetcher"))
    extractors = build_extractors(repository.list_sources(), fetcher)
    health = HealthMonitor(global_config.health)
    link_verifier = (
        LinkVerifier(global_config.link_verification, user_agent=global_config.user_agent)
        if global_config.link_verification.enabled
        else None
    )
    orchestrator = Orchestrator(
        extractors,
        health,
        global_config,
        link_verifier=link_verifier,
        dedup=DeduplicationEngine(global_config.deduplication),
        thread_pool=ThreadPoolManager(global_config.max_concurrent_sources),
    )
    cache = CacheManager(orchestrator.refresh_listings, name="aggregate", config=global_config.cache)
    return AggregatorService(
        repository=repository,
        global_config=global_config,
        fetcher=fetcher,
        health_monitor=health,
        orchestrator=orchestrator,
        cache=cache,
        scheduler=APSchedulerAdapter(),
        link_verifier=link_verifier,
    )


__all__ = ["AggregatorService", "build_service"]
