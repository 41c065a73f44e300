"""Single-flight result cache refreshed in the background."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Event, Lock
from typing import TYPE_CHECKING, Callable, Iterable

import structlog

from .config import CacheConfig
from .errors import CacheComputeFailure
from .logging_conf import configure_logging
from .models import CacheEntry, CacheSnapshot, Listing, utcnow

if TYPE_CHECKING:
    from .scheduler import APSchedulerAdapter


@dataclass
class _Flight:
    done: Event = field(default_factory=Event)
    entry: CacheEntry | None = None
    error: BaseException | None = None


class CacheManager:
    """Hold one immutable ``CacheEntry`` and recompute it on demand or on a timer.

    Readers do a single attribute read. Only the leader of a flight writes, and
    a failed compute leaves the previous entry in place. The in-flight compute
    belongs to this manager, so managers never share results.
    """

    def __init__(
        self,
        compute: Callable[[], Iterable[Listing]],
        name: str = "aggregate",
        config: CacheConfig | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.compute = compute
        self.name = name
        self.config = config or CacheConfig()
        self.logger = (logger or configure_logging()).bind(component="cache", cache=name)
        self._entry: CacheEntry | None = None
        self._flight: _Flight | None = None
        self._flight_lock = Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_aggregate(self) -> tuple[Listing, ...]:
        """Return cached listings; the first call ever computes synchronously."""

        entry = self._entry
        if entry is not None:
            return entry.value
        try:
            return self._fly().value
        except CacheComputeFailure:
            return ()

    def snapshot(self) -> CacheSnapshot:
        entry = self._entry
        if entry is None:
            return CacheSnapshot(listings=(), computed_at=None, ready=False)
        return CacheSnapshot(listings=entry.value, computed_at=entry.computed_at, ready=True)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def refresh(self) -> CacheEntry:
        """Recompute now. Raises ``CacheComputeFailure`` and keeps the old entry on error."""

        return self._fly()

    def refresh_quietly(self) -> None:
        try:
            self.refresh()
        except CacheComputeFailure as exc:
            self.logger.error("cache_refresh_failed", error=str(exc.cause))

    def invalidate(self) -> None:
        self._entry = None
        self.logger.info("cache_invalidated")

    def start(self, scheduler: "APSchedulerAdapter") -> None:
        """Register the periodic refresh and optionally pre-warm once."""

        scheduler.schedule_refresh(self.name, self.refresh_quietly, self.config.refresh_interval)
        if self.config.warm_on_start:
            self.logger.info("cache_prewarm")
            self.refresh_quietly()

    # ------------------------------------------------------------------
    def _fly(self) -> CacheEntry:
        with self._flight_lock:
            flight = self._flight
            leader = flight is None
            if leader:
                flight = _Flight()
                self._flight = flight

        if not leader:
            flight.done.wait()
        else:
            try:
                value = tuple(self.compute())
                flight.entry = CacheEntry(value=value, computed_at=utcnow())
                self._entry = flight.entry
                self.logger.info("cache_refreshed", listings=len(value))
            except Exception as exc:  # noqa: BLE001
                flight.error = exc
                self.logger.error("cache_compute_failed", error=str(exc))
            finally:
                with self._flight_lock:
                    self._flight = None
                flight.done.set()

        if flight.entry is None:
            raise CacheComputeFailure(self.name, flight.error or RuntimeError("no result"))
        return flight.entry


__all__ = ["CacheManager"]
