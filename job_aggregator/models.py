"""Domain records flowing through the aggregation pipeline."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SourceIdentity(str, Enum):
    """Closed set of job sites, one per extractor implementation."""

    INDEED = "indeed"
    LINKEDIN = "linkedin"
    NAUKRI = "naukri"
    GLASSDOOR = "glassdoor"
    INTERNSHALA = "internshala"
    SHINE = "shine"
    WELLFOUND = "wellfound"
    CUTSHORT = "cutshort"
    HIRIST = "hirist"
    FRESHERSWORLD = "freshersworld"
    JOBSORA = "jobsora"

    @classmethod
    def parse(cls, value: "str | SourceIdentity") -> "SourceIdentity":
        """Resolve an identity from its value or a case-insensitive name."""

        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown source: {value}")


class HealthStatus(str, Enum):
    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    FAILING = "FAILING"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class Listing:
    """A single job posting normalised into the shared record shape.

    ``created_at`` is stamped once at construction; ``dataclasses.replace``
    carries the original value forward. ``link_verified`` is tri-state:
    ``None`` until the link verifier has looked at the record.
    """

    title: str
    company: str
    target_url: str
    description: str = ""
    location: str | None = None
    salary_range: str | None = None
    experience_required: int | None = None
    posted_at: datetime | None = None
    source: SourceIdentity | None = None
    link_verified: bool | None = None
    created_at: datetime = field(default_factory=utcnow)

    def is_valid(self) -> bool:
        return all(
            isinstance(value, str) and value.strip()
            for value in (self.title, self.company, self.target_url)
        )

    def is_complete(self) -> bool:
        """Whether every field a reader relies on is populated."""

        return self.is_valid() and bool(self.description.strip()) and bool(
            (self.location or "").strip()
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "company": self.company,
            "target_url": self.target_url,
            "description": self.description,
            "location": self.location,
            "salary_range": self.salary_range,
            "experience_required": self.experience_required,
            "posted_at": self.posted_at.isoformat() if self.posted_at else None,
            "created_at": self.created_at.isoformat(),
            "source": self.source.value if self.source else None,
            "link_verified": self.link_verified,
        }


@dataclass
class SourceHealth:
    """Mutable per-source health record; written only by the health monitor."""

    source: SourceIdentity
    status: HealthStatus = HealthStatus.UNKNOWN
    last_success: datetime | None = None
    last_failure: datetime | None = None
    last_job_count: int = 0
    consecutive_failures: int = 0
    last_error: str | None = None
    success_count: int = 0
    failure_count: int = 0
    total_jobs_checked: int = 0
    complete_jobs: int = 0
    recent_job_counts: deque[int] = field(default_factory=lambda: deque(maxlen=5))

    @property
    def success_rate(self) -> float:
        total = self.success_count + self.failure_count
        return 0.0 if total == 0 else self.success_count / total

    @property
    def completeness(self) -> float | None:
        if self.total_jobs_checked == 0:
            return None
        return self.complete_jobs / self.total_jobs_checked

    def copy(self) -> "SourceHealth":
        return SourceHealth(
            source=self.source,
            status=self.status,
            last_success=self.last_success,
            last_failure=self.last_failure,
            last_job_count=self.last_job_count,
            consecutive_failures=self.consecutive_failures,
            last_error=self.last_error,
            success_count=self.success_count,
            failure_count=self.failure_count,
            total_jobs_checked=self.total_jobs_checked,
            complete_jobs=self.complete_jobs,
            recent_job_counts=deque(self.recent_job_counts, maxlen=self.recent_job_counts.maxlen),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "status": self.status.value,
            "last_success": self.last_success.isoformat() if self.last_success else None,
            "last_failure": self.last_failure.isoformat() if self.last_failure else None,
            "last_job_count": self.last_job_count,
            "consecutive_failures": self.consecutive_failures,
            "last_error": self.last_error,
            "success_rate": round(self.success_rate, 3),
            "completeness": None if self.completeness is None else round(self.completeness, 3),
        }


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Immutable cached result; swapped wholesale on refresh."""

    value: tuple[Listing, ...]
    computed_at: datetime


@dataclass(frozen=True, slots=True)
class CacheSnapshot:
    """What readers see; ``ready`` is False until a compute has succeeded."""

    listings: tuple[Listing, ...]
    computed_at: datetime | None
    ready: bool


__all__ = [
    "CacheEntry",
    "CacheSnapshot",
    "HealthStatus",
    "Listing",
    "SourceHealth",
    "SourceIdentity",
    "utcnow",
]
