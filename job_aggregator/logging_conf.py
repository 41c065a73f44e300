"""structlog on top of stdlib logging, with JSON files under ``<home>/logs``."""

from __future__ import annotations

import logging
import logging.config
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import structlog

from .config.loader import project_home

ROOT_LOGGER = "job_aggregator"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_LOGGING_INITIALISED = False


@dataclass(frozen=True, slots=True)
class LogPaths:
    root: Path
    aggregator: Path
    errors: Path
    sources: Path

    def for_source(self, source_name: str) -> Path:
        return self.sources / f"{source_name}.log"


def log_paths() -> LogPaths:
    """Resolve log locations for the current home and make sure they exist."""

    root = project_home() / "logs"
    paths = LogPaths(
        root=root,
        aggregator=root / "aggregator.log",
        errors=root / "error.log",
        sources=root / "sources",
    )
    paths.sources.mkdir(parents=True, exist_ok=True)
    paths.aggregator.touch(exist_ok=True)
    paths.errors.touch(exist_ok=True)
    return paths


def _file_handler(path: Path, level: str) -> dict[str, Any]:
    return {
        "class": "logging.FileHandler",
        "level": level,
        "filename": str(path),
        "formatter": "json",
        "encoding": "utf-8",
    }


def _dict_config(paths: LogPaths, level: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "fmt": JSON_FORMAT,
            }
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "level": level, "formatter": "json"},
            "aggregator_file": _file_handler(paths.aggregator, "INFO"),
            "error_file": _file_handler(paths.errors, "ERROR"),
        },
        "loggers": {
            ROOT_LOGGER: {
                "handlers": ["console", "aggregator_file", "error_file"],
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Install handlers once per process and return the application logger.

    Later calls only raise the level when ``verbose`` is requested.
    """

    global _LOGGING_INITIALISED
    paths = log_paths()
    if not _LOGGING_INITIALISED:
        logging.config.dictConfig(_dict_config(paths, "DEBUG" if verbose else "INFO"))
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    elif verbose:
        logging.getLogger(ROOT_LOGGER).setLevel(logging.DEBUG)
    return structlog.get_logger(ROOT_LOGGER)


def source_logger(source_name: str, verbose: bool = False) -> structlog.BoundLogger:
    """Logger for one job site; its events also land in ``logs/sources/<name>.log``."""

    configure_logging(verbose)
    path = log_paths().for_source(source_name)
    logger_name = f"{ROOT_LOGGER}.source.{source_name}"
    py_logger = logging.getLogger(logger_name)
    attached = any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == str(path)
        for handler in py_logger.handlers
    )
    if not attached:
        handler = logging.FileHandler(path, encoding="utf-8")
        root_handlers = logging.getLogger(ROOT_LOGGER).handlers
        if root_handlers:
            handler.setFormatter(root_handlers[0].formatter)
        handler.setLevel(logging.INFO)
        py_logger.addHandler(handler)
    return structlog.get_logger(logger_name).bind(source=source_name)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_source_logs() -> Iterable[Path]:
    return sorted(log_paths().sources.glob("*.log"))


def log_dir() -> Path:
    return log_paths().root


__all__ = [
    "LogPaths",
    "available_source_logs",
    "configure_logging",
    "log_dir",
    "log_paths",
    "source_logger",
    "tail_log",
]
