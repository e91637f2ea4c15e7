#!/usr/bin/env python3
"""
utils/config.py

Credential and settings loading for fleet operations.
Reads a single YAML file, by default ~/.ec2/aws_config.yaml.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from fleet_ops.utils.exceptions import ConfigMissing
from fleet_ops.utils.logger import setup_logger

logger = setup_logger(__name__, "config.log")

DEFAULT_CONFIG_PATH = "~/.ec2/aws_config.yaml"
CONFIG_ENV_VAR = "FLEET_OPS_CONFIG"
DEFAULT_AWS_REGION = "us-east-1"
REQUIRED_KEYS = ("access_key_id", "secret_access_key")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Credentials:
    """Credentials and launch defaults, immutable for the process lifetime."""

    access_key_id: str
    secret_access_key: str
    default_key: Optional[str] = None
    default_security_group: Optional[str] = None
    region: str = DEFAULT_AWS_REGION

    def __repr__(self) -> str:
        # keep the secret out of tracebacks and shell echoes
        return (
            f"Credentials(access_key_id={self.access_key_id!r}, "
            f"default_key={self.default_key!r}, "
            f"default_security_group={self.default_security_group!r}, "
            f"region={self.region!r})"
        )


def get_config_path(config_path: Optional[str] = None) -> Path:
    """Resolve the configuration file: explicit path, then env var, then default."""
    if config_path:
        return Path(config_path).expanduser()
    if os.environ.get(CONFIG_ENV_VAR):
        return Path(os.environ[CONFIG_ENV_VAR]).expanduser()
    return Path(DEFAULT_CONFIG_PATH).expanduser()


class ConfigManager:
    """
    Configuration manager.

    Features:
    - YAML configuration loading, cached after the first read
    - Environment variable override support
    - Fails fast with ConfigMissing when no credentials are available
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize ConfigManager.

        Args:
            config_path: Custom config file path (defaults to ~/.ec2/aws_config.yaml)
        """
        self.settings_file = get_config_path(config_path)

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load a YAML file, raising ConfigMissing when it cannot be used.
        """
        if not file_path.exists():
            # catch missing authentication before AWS does
            raise ConfigMissing(f"No AWS authentication found! Expected {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading {file_path}: {e}")
            raise ConfigMissing(f"Unable to read {file_path}: {e}") from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigMissing(f"{file_path} must contain a mapping of settings")
        return content

    def load_settings(self) -> Dict[str, Any]:
        """
        Load application settings.
        """
        return self._load_yaml_file(self.settings_file)

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration as a cached property."""
        if not hasattr(self, "_cached_config"):
            self._cached_config = self.load_settings()
        return self._cached_config

    def get_value(
        self, key_path: str, default: Any = None, env_var: Optional[str] = None
    ) -> Any:
        """
        Get configuration value with dot notation support and environment variable override.
        """
        if env_var and env_var in os.environ:
            return os.environ[env_var]

        current = self.config
        try:
            for key in key_path.split("."):
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_aws_region(self) -> str:
        """Get AWS region with environment variable override support."""
        return self.get_value("region", DEFAULT_AWS_REGION, env_var="AWS_DEFAULT_REGION")

    def get_logging_level(self) -> str:
        """Get logging level, falling back to INFO for unknown names."""
        level = str(self.get_value("logging.level", "INFO", env_var="LOG_LEVEL")).upper()
        if level not in LOG_LEVELS:
            logger.warning(f"Unknown logging level '{level}', using INFO")
            return "INFO"
        return level

    def get_credentials(self) -> Credentials:
        """Build the immutable Credentials record from the settings file."""
        missing = [key for key in REQUIRED_KEYS if not self.get_value(key)]
        if missing:
            raise ConfigMissing(
                f"No AWS authentication found! {self.settings_file} is missing: "
                f"{', '.join(missing)}"
            )

        credentials = Credentials(
            access_key_id=str(self.get_value("access_key_id")),
            secret_access_key=str(self.get_value("secret_access_key")),
            default_key=self.get_value("default_key"),
            default_security_group=self.get_value("default_security_group"),
            region=self.get_aws_region(),
        )
        logger.debug(f"Loaded credentials from {self.settings_file}")
        return credentials


def load_credentials(config_path: Optional[str] = None) -> Credentials:
    """Load Credentials from the resolved configuration file."""
    return ConfigManager(config_path).get_credentials()
