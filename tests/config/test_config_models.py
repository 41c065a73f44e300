from __future__ import annotations

import pytest
from pydantic import ValidationError

from job_aggregator.config.models import (
    DEFAULT_SOURCE_SETTINGS,
    CacheConfig,
    DeduplicationConfig,
    GlobalConfig,
    HealthConfig,
    LinkVerificationConfig,
    SourceConfig,
)
from job_aggregator.models import SourceIdentity


def test_defaults_cover_every_identity() -> None:
    assert set(DEFAULT_SOURCE_SETTINGS) == set(SourceIdentity)
    indeed = SourceConfig.default_for("indeed")
    assert indeed.request_delay == 5.0
    assert indeed.max_retries == 3
    assert indeed.max_age_days == 7


def test_identity_accepts_names_and_values() -> None:
    assert SourceConfig(identity="LinkedIn").identity is SourceIdentity.LINKEDIN
    assert SourceConfig(identity="FRESHERSWORLD").identity is SourceIdentity.FRESHERSWORLD
    with pytest.raises(ValidationError):
        SourceConfig(identity="monster")


@pytest.mark.parametrize(
    "overrides",
    [
        {"search_query": "   "},
        {"request_delay": -1},
        {"max_pages": 0},
        {"max_retries": -1},
        {"max_age_days": 0},
        {"request_timeout": 0},
    ],
)
def test_source_config_rejects_bad_values(overrides) -> None:
    with pytest.raises(ValidationError):
        SourceConfig(identity="indeed", **overrides)


def test_global_defaults() -> None:
    config = GlobalConfig()
    assert config.parallel_sources is True
    assert config.max_concurrent_sources == 3
    assert config.source_timeout is None
    assert config.include_undated is True
    assert config.cache.refresh_interval == 3600
    assert config.health.failure_threshold == 3
    assert config.link_verification.batch_timeout == 30
    assert "naukri.com" in config.link_verification.trusted_hosts


def test_dedup_weights_sum_to_one() -> None:
    config = DeduplicationConfig(title_weight=0.7)
    assert config.company_weight == pytest.approx(0.3)
    with pytest.raises(ValidationError):
        DeduplicationConfig(title_threshold=1.5)


@pytest.mark.parametrize(
    ("model", "overrides"),
    [
        (GlobalConfig, {"max_concurrent_sources": 0}),
        (GlobalConfig, {"source_timeout": 0}),
        (GlobalConfig, {"max_age_days": 0}),
        (CacheConfig, {"refresh_interval": 0}),
        (HealthConfig, {"failure_threshold": 0}),
        (HealthConfig, {"drop_ratio": 2}),
        (LinkVerificationConfig, {"timeout": 0}),
        (LinkVerificationConfig, {"max_workers": 0}),
    ],
)
def test_sub_configs_validate(model, overrides) -> None:
    with pytest.raises(ValidationError):
        model(**overrides)
