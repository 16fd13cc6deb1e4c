"""Configuration management for SQLBridge."""

from sqlbridge.config.models import (
    DatabaseType,
    DatabaseConfig,
    BridgeConfig,
    EnvironmentSettings,
    DEFAULT_PORTS,
)
from sqlbridge.config.parser import (
    ConfigParser,
    load_config,
    create_sample_config,
)

__all__ = [
    # Models
    "DatabaseType",
    "DatabaseConfig",
    "BridgeConfig",
    "EnvironmentSettings",
    "DEFAULT_PORTS",
    # Parser
    "ConfigParser",
    "load_config",
    "create_sample_config",
]
