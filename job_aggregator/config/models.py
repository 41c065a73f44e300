"""Pydantic models used across the job aggregator configuration flow."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models import SourceIdentity

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Per-source defaults: (search query, request delay seconds, max pages)
DEFAULT_SOURCE_SETTINGS: dict[SourceIdentity, tuple[str, float, int]] = {
    SourceIdentity.INDEED: ("software engineer entry level", 5.0, 3),
    SourceIdentity.LINKEDIN: ("entry level software", 5.0, 3),
    SourceIdentity.NAUKRI: ("software engineer", 3.0, 3),
    SourceIdentity.GLASSDOOR: ("software engineer entry level", 2.0, 3),
    SourceIdentity.INTERNSHALA: ("software development", 2.0, 3),
    SourceIdentity.SHINE: ("software engineer", 3.0, 3),
    SourceIdentity.WELLFOUND: ("software engineer", 4.0, 3),
    SourceIdentity.CUTSHORT: ("software engineer", 2.0, 3),
    SourceIdentity.HIRIST: ("software engineer", 5.0, 2),
    SourceIdentity.FRESHERSWORLD: ("software engineer", 2.0, 3),
    SourceIdentity.JOBSORA: ("software engineer entry level", 3.0, 3),
}


class SourceConfig(BaseModel):
    """Per-source scraping parameters."""

    identity: SourceIdentity
    enabled: bool = True
    search_query: str = "software engineer"
    location: str = "India"
    request_delay: float = 3.0
    max_pages: int = 3
    max_retries: int = 3
    max_age_days: int = 7
    request_timeout: float = 20.0

    @field_validator("identity", mode="before")
    @classmethod
    def _coerce_identity(cls, value: Any) -> SourceIdentity:
        return SourceIdentity.parse(value)

    @field_validator("search_query", mode="after")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("search_query cannot be empty")
        return value.strip()

    @model_validator(mode="after")
    def _validate_limits(self) -> "SourceConfig":
        if self.request_delay < 0:
            raise ValueError("request_delay must be >= 0")
        if self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.max_age_days < 1:
            raise ValueError("max_age_days must be >= 1")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        return self

    @classmethod
    def default_for(cls, identity: SourceIdentity | str) -> "SourceConfig":
        identity = SourceIdentity.parse(identity)
        query, delay, pages = DEFAULT_SOURCE_SETTINGS[identity]
        return cls(identity=identity, search_query=query, request_delay=delay, max_pages=pages)


class DeduplicationConfig(BaseModel):
    """Similarity thresholds for fuzzy duplicate detection.

    The defaults are empirical and should be re-validated against a labelled
    duplicate/non-duplicate corpus before being tightened or relaxed.
    """

    title_threshold: float = 0.85
    company_threshold: float = 0.90
    combined_threshold: float = 0.80
    description_threshold: float = 0.70
    title_weight: float = 0.6

    @model_validator(mode="after")
    def _validate_ratios(self) -> "DeduplicationConfig":
        for name in (
            "title_threshold",
            "company_threshold",
            "combined_threshold",
            "description_threshold",
            "title_weight",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1]")
        return self

    @property
    def company_weight(self) -> float:
        return 1.0 - self.title_weight


class LinkVerificationConfig(BaseModel):
    enabled: bool = True
    timeout: float = 3.0
    batch_timeout: float = 30.0
    max_workers: int = 10
    trusted_hosts: list[str] = Field(
        default_factory=lambda: [
            "shine.com",
            "wellfound.com",
            "naukri.com",
            "linkedin.com",
            "glassdoor.com",
            "glassdoor.co.in",
        ]
    )

    @model_validator(mode="after")
    def _validate_bounds(self) -> "LinkVerificationConfig":
        if self.timeout <= 0 or self.batch_timeout <= 0:
            raise ValueError("Link verification timeouts must be > 0")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        return self


class CacheConfig(BaseModel):
    refresh_interval: float = 3600.0
    warm_on_start: bool = True

    @field_validator("refresh_interval", mode="after")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("refresh_interval must be > 0")
        return value


class HealthConfig(BaseModel):
    failure_threshold: int = 3
    drop_ratio: float = 0.5
    completeness_alert_threshold: float = 0.8

    @model_validator(mode="after")
    def _validate_health(self) -> "HealthConfig":
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if not 0.0 <= self.drop_ratio <= 1.0:
            raise ValueError("drop_ratio must be within [0, 1]")
        if not 0.0 <= self.completeness_alert_threshold <= 1.0:
            raise ValueError("completeness_alert_threshold must be within [0, 1]")
        return self


class GlobalConfig(BaseModel):
    """Global controls shared across sources."""

    parallel_sources: bool = True
    max_concurrent_sources: int = 3
    source_timeout: float | None = None
    max_age_days: int = 7
    include_undated: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    deduplication: DeduplicationConfig = Field(default_factory=DeduplicationConfig)
    link_verification: LinkVerificationConfig = Field(default_factory=LinkVerificationConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)

    @model_validator(mode="after")
    def _validate_global(self) -> "GlobalConfig":
        if self.max_concurrent_sources < 1:
            raise ValueError("max_concurrent_sources must be >= 1")
        if self.source_timeout is not None and self.source_timeout <= 0:
            raise ValueError("source_timeout must be > 0 when set")
        if self.max_age_days < 1:
            raise ValueError("max_age_days must be >= 1")
        return self


__all__ = [
    "CacheConfig",
    "DEFAULT_SOURCE_SETTINGS",
    "DEFAULT_USER_AGENT",
    "DeduplicationConfig",
    "GlobalConfig",
    "HealthConfig",
    "LinkVerificationConfig",
    "SourceConfig",
]
