"""Per-source health tracking fed by orchestrator outcomes."""

from __future__ import annotations

from collections import Counter
from threading import Lock
from typing import Any

import structlog

from .config import HealthConfig
from .logging_conf import configure_logging
from .models import HealthStatus, SourceHealth, SourceIdentity, utcnow


class HealthMonitor:
    """Keep one ``SourceHealth`` per source, each guarded by its own lock."""

    def __init__(
        self,
        config: HealthConfig | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config or HealthConfig()
        self.logger = (logger or configure_logging()).bind(component="health")
        self._records: dict[SourceIdentity, SourceHealth] = {}
        self._locks: dict[SourceIdentity, Lock] = {}
        self._registry_lock = Lock()

    # ------------------------------------------------------------------
    def _slot(self, source: SourceIdentity | str) -> tuple[SourceHealth, Lock]:
        identity = SourceIdentity.parse(source)
        with self._registry_lock:
            record = self._records.get(identity)
            if record is None:
                record = SourceHealth(source=identity)
                self._records[identity] = record
                self._locks[identity] = Lock()
            return record, self._locks[identity]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def record_success(self, source: SourceIdentity | str, job_count: int) -> SourceHealth:
        record, lock = self._slot(source)
        with lock:
            previous = list(record.recent_job_counts)
            record.last_success = utcnow()
            record.last_job_count = job_count
            record.consecutive_failures = 0
            record.last_error = None
            record.success_count += 1
            record.recent_job_counts.append(job_count)

            if job_count == 0:
                record.status = HealthStatus.FAILING
            elif previous and job_count < self.config.drop_ratio * (sum(previous) / len(previous)):
                record.status = HealthStatus.DEGRADED
            else:
                record.status = HealthStatus.HEALTHY
            snapshot = record.copy()
        self.logger.info(
            "source_success",
            source=snapshot.source.value,
            jobs=job_count,
            status=snapshot.status.value,
        )
        return snapshot

    def record_failure(self, source: SourceIdentity | str, error: BaseException | str) -> SourceHealth:
        record, lock = self._slot(source)
        with lock:
            record.last_failure = utcnow()
            record.consecutive_failures += 1
            record.failure_count += 1
            record.last_error = str(error)
            if (
                record.consecutive_failures >= self.config.failure_threshold
                or record.last_success is None
            ):
                record.status = HealthStatus.FAILING
            else:
                record.status = HealthStatus.DEGRADED
            snapshot = record.copy()
        self.logger.warning(
            "source_failure",
            source=snapshot.source.value,
            consecutive_failures=snapshot.consecutive_failures,
            status=snapshot.status.value,
            error=snapshot.last_error,
        )
        return snapshot

    def record_data_quality(self, source: SourceIdentity | str, total: int, complete: int) -> None:
        record, lock = self._slot(source)
        with lock:
            record.total_jobs_checked += total
            record.complete_jobs += complete
        if total == 0:
            return
        ratio = complete / total
        if ratio < self.config.completeness_alert_threshold:
            self.logger.warning(
                "data_quality_alert",
                source=record.source.value,
                completeness=round(ratio, 3),
                total=total,
                complete=complete,
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_health(self, source: SourceIdentity | str) -> SourceHealth:
        """Copy of the source's record; ``UNKNOWN`` when nothing was recorded."""

        identity = SourceIdentity.parse(source)
        with self._registry_lock:
            record = self._records.get(identity)
            lock = self._locks.get(identity)
        if record is None or lock is None:
            return SourceHealth(source=identity)
        with lock:
            return record.copy()

    def get_all_health(self) -> dict[SourceIdentity, SourceHealth]:
        with self._registry_lock:
            identities = list(self._records)
        return {identity: self.get_health(identity) for identity in identities}

    def summary(self) -> dict[str, Any]:
        records = self.get_all_health()
        counts = Counter(record.status for record in records.values())
        return {
            "total": len(records),
            "healthy": counts[HealthStatus.HEALTHY],
            "degraded": counts[HealthStatus.DEGRADED],
            "failing": counts[HealthStatus.FAILING],
            "sources": {
                identity.value: {
                    "status": record.status.value,
                    "last_success": record.last_success.isoformat() if record.last_success else None,
                    "last_job_count": record.last_job_count,
                }
                for identity, record in records.items()
            },
        }


__all__ = ["HealthMonitor"]
