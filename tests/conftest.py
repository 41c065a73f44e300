"""Shared fixtures for the job aggregator test-suite."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from job_aggregator.config import (
    ConfigLocator,
    ConfigRepository,
    GlobalConfig,
    LinkVerificationConfig,
    SourceConfig,
)
from job_aggregator.models import Listing, SourceIdentity

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

# Far enough apart that factory listings never collide under fuzzy dedup.
ROLES = (
    "Backend Developer",
    "Data Analyst",
    "QA Tester",
    "Mobile Engineer",
    "Support Associate",
    "UX Designer",
    "Cloud Architect",
    "Sales Executive",
)
COMPANIES = ("Initech", "Globex", "Umbrella", "Hooli", "Stark", "Wonka", "Tyrell", "Vandelay")


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config and log files out of the working tree."""

    monkeypatch.setenv("JOB_AGGREGATOR_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def sample_global_config() -> GlobalConfig:
    return GlobalConfig(
        parallel_sources=False,
        link_verification=LinkVerificationConfig(enabled=False),
    )


@pytest.fixture
def sample_source_config() -> Callable[..., SourceConfig]:
    def _builder(**overrides: Any) -> SourceConfig:
        base: dict[str, Any] = {
            "identity": SourceIdentity.INDEED,
            "search_query": "software engineer",
            "location": "India",
            "request_delay": 0.0,
            "max_pages": 3,
            "max_retries": 2,
        }
        base.update(overrides)
        return SourceConfig(**base)

    return _builder


@pytest.fixture
def make_listing() -> Callable[..., Listing]:
    counter = {"value": 0}

    def _factory(**overrides: Any) -> Listing:
        counter["value"] += 1
        index = counter["value"]
        base: dict[str, Any] = {
            "title": ROLES[(index - 1) % len(ROLES)],
            "company": COMPANIES[(index - 1) % len(COMPANIES)],
            "target_url": f"https://jobs.example.com/{index}",
            "description": f"Opening {index} on the team",
            "location": "Bengaluru",
            "source": SourceIdentity.INDEED,
        }
        base.update(overrides)
        return Listing(**base)

    return _factory


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> Iterable[ConfigRepository]:
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository
