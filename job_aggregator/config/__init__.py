"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    CacheConfig,
    DeduplicationConfig,
    GlobalConfig,
    HealthConfig,
    LinkVerificationConfig,
    SourceConfig,
)

__all__ = [
    "CacheConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DeduplicationConfig",
    "GlobalConfig",
    "HealthConfig",
    "LinkVerificationConfig",
    "SourceConfig",
]
