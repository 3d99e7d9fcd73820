"""Configuration provider following Black Box Design principles."""
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import yaml

from autorepair.modules.api.errors import ConfigurationError

logger = logging.getLogger("autorepair.config")

DEFAULT_ANNOTATION_KEY = "cassandra-autorepair.jmkeyes.ca/autorepair"
DEFAULT_REPAIR_COMMAND = ["nodetool", "repair", "-pr"]


@dataclass
class RepairConfig:
    """What to run and how to relay its output."""
    annotation_key: str = DEFAULT_ANNOTATION_KEY
    command: List[str] = field(default_factory=lambda: list(DEFAULT_REPAIR_COMMAND))
    pipe_buffer_lines: int = 64
    poll_interval_seconds: float = 1.0
    teardown_timeout_seconds: float = 10.0
    line_prefix: str = "   "


@dataclass
class ClusterConfig:
    """Kubernetes connection configuration."""
    in_cluster: bool
    kubeconfig_path: str
    namespace: Optional[str]


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_repair_config(self) -> RepairConfig:
        """Get repair configuration."""
        ...

    def get_cluster_config(self) -> ClusterConfig:
        """Get cluster connection configuration."""
        ...

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        ...


# YAML key -> (RepairConfig attribute, expected type)
_REPAIR_KEYS = {
    "annotationKey": ("annotation_key", str),
    "command": ("command", list),
    "pipeBufferLines": ("pipe_buffer_lines", int),
    "pollIntervalSeconds": ("poll_interval_seconds", (int, float)),
    "teardownTimeoutSeconds": ("teardown_timeout_seconds", (int, float)),
    "linePrefix": ("line_prefix", str),
}


def load_repair_config(path: Optional[str]) -> RepairConfig:
    """
    Load repair configuration from a YAML overrides file.

    A missing path or missing file yields the defaults. Unknown keys are
    ignored with a warning.

    Args:
        path: Path to YAML file, or None

    Returns:
        RepairConfig

    Raises:
        ConfigurationError: If the file is unreadable or holds invalid values
    """
    defaults = RepairConfig()
    if not path:
        return defaults

    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return defaults

    try:
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config {config_path}: {e}") from e

    if config_data is None:
        return defaults
    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Config {config_path} must be a mapping")

    overrides: Dict[str, Any] = {}
    for key, value in config_data.items():
        if key not in _REPAIR_KEYS:
            logger.warning(f"Ignoring unknown config key: {key}")
            continue
        attr, expected = _REPAIR_KEYS[key]
        if isinstance(value, bool) or not isinstance(value, expected):
            raise ConfigurationError(f"Invalid value for {key}: {value!r}")
        overrides[attr] = value

    config = replace(defaults, **overrides)
    _validate_repair_config(config)
    logger.info(f"Configuration loaded from {config_path}")
    return config


def _validate_repair_config(config: RepairConfig) -> None:
    if not config.annotation_key:
        raise ConfigurationError("annotationKey must not be empty")
    if not config.command or not all(isinstance(arg, str) and arg for arg in config.command):
        raise ConfigurationError("command must be a non-empty list of strings")
    if config.pipe_buffer_lines < 1:
        raise ConfigurationError(f"Invalid pipeBufferLines: {config.pipe_buffer_lines}")
    if config.poll_interval_seconds <= 0:
        raise ConfigurationError(f"Invalid pollIntervalSeconds: {config.poll_interval_seconds}")
    if config.teardown_timeout_seconds <= 0:
        raise ConfigurationError(
            f"Invalid teardownTimeoutSeconds: {config.teardown_timeout_seconds}"
        )


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.getenv("AUTOREPAIR_CONFIG")

    def get_repair_config(self) -> RepairConfig:
        """Get repair configuration, applying the YAML overrides file if any."""
        return load_repair_config(self.config_path)

    def get_cluster_config(self) -> ClusterConfig:
        """Get cluster configuration from environment variables."""
        return ClusterConfig(
            # Set by the kubelet in every pod
            in_cluster="KUBERNETES_SERVICE_HOST" in os.environ,
            kubeconfig_path=os.getenv(
                "KUBECONFIG", os.path.join(os.path.expanduser("~"), ".kube", "config")
            ),
            namespace=os.getenv("POD_NAMESPACE") or None,
        )

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration from environment variables."""
        return LoggingConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
