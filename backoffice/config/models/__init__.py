"""Configuration model exports.

    from backoffice.config.models import APIConfig, StorageConfig
"""

from backoffice.config.models.api import APIConfig, AuthConfig
from backoffice.config.models.audit import AuditConfig
from backoffice.config.models.flags import FeatureFlagsConfig
from backoffice.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from backoffice.config.models.storage import (
    PostgresConfig,
    SettingsCacheConfig,
    StorageConfig,
)

__all__ = [
    "APIConfig",
    "AuthConfig",
    "AuditConfig",
    "FeatureFlagsConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "PostgresConfig",
    "SettingsCacheConfig",
    "StorageConfig",
    "TracingConfig",
]
