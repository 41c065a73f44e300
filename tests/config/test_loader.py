from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from job_aggregator.config.loader import ConfigLocator, ConfigRepository, project_home
from job_aggregator.config.models import GlobalConfig, SourceConfig
from job_aggregator.models import SourceIdentity


def test_config_locator_uses_env_and_creates_directories(tmp_path: Path) -> None:
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    assert project_home() == tmp_path.resolve()
    for path in (locator.data_dir, locator.sources_dir, locator.logs_dir):
        assert path.is_dir()
    assert locator.global_config_path() == tmp_path.resolve() / "data" / "global_config.yaml"


def test_global_config_is_created_with_defaults(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_global_config()
    assert config == GlobalConfig()
    assert temp_config_repository.locator.global_config_path().exists()


def test_global_config_roundtrip(tmp_path: Path) -> None:
    repo = ConfigRepository(ConfigLocator(project_root=tmp_path))
    config = GlobalConfig(parallel_sources=False, max_age_days=3, source_timeout=45)
    config.deduplication.title_threshold = 0.9
    repo.save_global_config(config)

    fresh = ConfigRepository(ConfigLocator(project_root=tmp_path))
    loaded = fresh.load_global_config()
    assert loaded == config
    assert loaded.deduplication.title_threshold == 0.9


def test_missing_source_falls_back_to_defaults(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_source("hirist")
    assert config == SourceConfig.default_for(SourceIdentity.HIRIST)
    assert config.max_pages == 2


def test_source_override_cycle(temp_config_repository: ConfigRepository, sample_source_config) -> None:
    override = sample_source_config(identity=SourceIdentity.SHINE, search_query="data analyst", max_pages=1)
    path = temp_config_repository.save_source(override)
    assert path.name == "shine.yaml"
    assert temp_config_repository.load_source(SourceIdentity.SHINE) == override

    listed = {item.identity: item for item in temp_config_repository.list_sources()}
    assert set(listed) == set(SourceIdentity)
    assert listed[SourceIdentity.SHINE].search_query == "data analyst"

    temp_config_repository.delete_source("shine")
    assert not path.exists()
    assert temp_config_repository.load_source("shine") == SourceConfig.default_for("shine")


def test_partial_override_file_uses_file_name_identity(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.source_path("naukri")
    path.write_text(yaml.safe_dump({"enabled": False, "location": "Pune"}), encoding="utf-8")
    config = temp_config_repository.load_source("naukri")
    assert config.identity is SourceIdentity.NAUKRI
    assert config.enabled is False
    assert config.location == "Pune"


def test_identity_mismatch_is_rejected(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.source_path("indeed")
    path.write_text(yaml.safe_dump({"identity": "linkedin"}), encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_source("indeed")


def test_non_mapping_file_is_rejected(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.source_path("cutshort")
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_source("cutshort")
