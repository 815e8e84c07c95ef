"""Configuration loading service"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..api.exceptions import ConfigError
from ..constants import PROJECT_CONFIG_FILE
from ..models.config import GitopsConfig

logger = logging.getLogger(__name__)


class ConfigService:
    """Build the run configuration from a YAML file and command line overrides"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config service

        Args:
            config_path: Explicit configuration file. When omitted,
                ``.gitops-tool.yaml`` in the working directory is used if
                it exists.
        """
        self.explicit = config_path is not None
        self.config_path = Path(config_path) if config_path else Path.cwd() / PROJECT_CONFIG_FILE

    def load_data(self) -> Dict[str, Any]:
        """Load raw configuration values from file

        Returns:
            Parsed mapping, empty when no file applies
        """
        if not self.config_path.exists():
            if self.explicit:
                raise ConfigError(f"Configuration file not found: {self.config_path}")
            return {}

        with open(self.config_path, 'r') as f:
            content = f.read()

        # Expand environment variables (tokens usually come from the CI env)
        content = os.path.expandvars(content)

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid configuration file {self.config_path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {self.config_path} must contain a mapping")

        logger.debug(f"Loaded configuration from {self.config_path}")
        return data

    def load_config(self, overrides: Optional[Mapping[str, Any]] = None) -> GitopsConfig:
        """Load configuration and apply overrides

        Args:
            overrides: Values taking precedence over the file. ``None`` and
                empty multi-valued options are ignored; a nested ``hosting``
                mapping is merged key by key.

        Returns:
            Configuration object
        """
        data = self.load_data()
        merge_overrides(data, overrides or {})
        return GitopsConfig.from_dict(data)


def merge_overrides(data: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``overrides`` into ``data`` in place, skipping unset values"""
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = list(value)
        if isinstance(value, Mapping):
            nested = data.get(key)
            if not isinstance(nested, dict):
                nested = {}
            data[key] = merge_overrides(nested, value)
            continue
        data[key] = value
    return data
