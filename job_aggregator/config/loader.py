"""Configuration loading helpers for the job aggregator."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from ..models import SourceIdentity
from .models import GlobalConfig, SourceConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
GLOBAL_CONFIG_FILENAME = "global_config.yaml"
SOURCE_CONFIG_SUFFIX = ".yaml"
HOME_ENV = "JOB_AGGREGATOR_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def project_home() -> Path:
    env_root = os.environ.get(HOME_ENV)
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[2]


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    sources_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        if os.environ.get(HOME_ENV) or self.project_root is None:
            root = project_home()
        else:
            root = self.project_root.resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.sources_dir = (self.data_dir / "sources").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.sources_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def global_config_path(self) -> Path:
        return self.data_dir / GLOBAL_CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._global_cache: GlobalConfig | None = None

    # ------------------------------------------------------------------
    # Global configuration helpers
    # ------------------------------------------------------------------
    def load_global_config(self) -> GlobalConfig:
        if self._global_cache is not None:
            return self._global_cache
        path = self.locator.global_config_path()
        if path.exists():
            global_cfg = GlobalConfig.model_validate(_read_file(path))
        else:
            global_cfg = GlobalConfig()
            self.save_global_config(global_cfg)
        self._global_cache = global_cfg
        return global_cfg

    def save_global_config(self, config: GlobalConfig) -> None:
        _write_file(self.locator.global_config_path(), config.model_dump(mode="json"))
        self._global_cache = config

    # ------------------------------------------------------------------
    # Source configuration helpers
    # ------------------------------------------------------------------
    def source_path(self, identity: SourceIdentity | str) -> Path:
        identity = SourceIdentity.parse(identity)
        return self.locator.sources_dir / f"{identity.value}{SOURCE_CONFIG_SUFFIX}"

    def _existing_source_file(self, identity: SourceIdentity) -> Path | None:
        for suffix in CONFIG_EXTENSIONS:
            candidate = self.locator.sources_dir / f"{identity.value}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    def load_source(self, identifier: SourceIdentity | str) -> SourceConfig:
        """Return the stored override for a source, or its built-in defaults."""

        identity = SourceIdentity.parse(identifier)
        path = self._existing_source_file(identity)
        if path is None:
            return SourceConfig.default_for(identity)
        payload = _read_file(path)
        payload.setdefault("identity", identity.value)
        config = SourceConfig.model_validate(payload)
        if config.identity is not identity:
            raise ValueError(f"{path.name} declares identity '{config.identity.value}'")
        return config

    def list_sources(self) -> list[SourceConfig]:
        return [self.load_source(identity) for identity in SourceIdentity]

    def save_source(self, config: SourceConfig) -> Path:
        path = self.source_path(config.identity)
        _write_file(path, config.model_dump(mode="json"))
        return path

    def delete_source(self, identifier: SourceIdentity | str) -> None:
        """Drop a stored override so the source falls back to its defaults."""

        identity = SourceIdentity.parse(identifier)
        path = self._existing_source_file(identity)
        if path is not None:
            path.unlink()


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository", "HOME_ENV", "project_home"]
