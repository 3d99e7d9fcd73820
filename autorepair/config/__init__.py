"""
Config Module - Black Box Interface

Purpose: Runtime configuration for the repair run
Interface: EnvConfigProvider, RepairConfig, ClusterConfig, LoggingConfig
Hidden: Environment parsing, YAML overrides file
"""

from .provider import (
    DEFAULT_ANNOTATION_KEY,
    DEFAULT_REPAIR_COMMAND,
    ClusterConfig,
    ConfigProvider,
    EnvConfigProvider,
    LoggingConfig,
    RepairConfig,
    load_repair_config,
)

__all__ = [
    "DEFAULT_ANNOTATION_KEY",
    "DEFAULT_REPAIR_COMMAND",
    "ClusterConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "LoggingConfig",
    "RepairConfig",
    "load_repair_config",
]
