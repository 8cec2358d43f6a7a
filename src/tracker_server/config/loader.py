"""ConfigLoader: YAML file per environment, env vars override."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from tracker_server.config.settings import ENV_PREFIX, ConfigurationError, Settings

_CONFIG_ROOT = Path(__file__).resolve().parent

# Selects config/<env>/settings.yaml.
ENV_VAR = f"{ENV_PREFIX}ENV"
# Points at an explicit settings file, bypassing the per-env lookup.
FILE_VAR = f"{ENV_PREFIX}CONFIG_FILE"


class ConfigLoader:
    """Load settings from YAML files with environment variable overrides."""

    @staticmethod
    def _settings_path() -> Path:
        """Resolve which settings.yaml to read."""
        explicit = os.environ.get(FILE_VAR)
        if explicit:
            return Path(explicit)
        env = os.environ.get(ENV_VAR, "dev")
        return _CONFIG_ROOT / env / "settings.yaml"

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        """Read a settings file. A missing file means no YAML layer.

        Raises:
            ConfigurationError: If the file does not hold a YAML mapping.
        """
        if not path.exists():
            logger.debug(f"No settings file at {path}, using env and defaults")
            return {}
        with path.open() as config_file:
            data = yaml.safe_load(config_file)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping")
        logger.debug(f"Loaded settings from {path}")
        return data

    @staticmethod
    def load_settings(**overrides: Any) -> Settings:
        """Build Settings with priority: overrides > env vars > YAML > defaults.

        pydantic-settings gives __init__ kwargs the highest priority, so YAML
        keys shadowed by a ``TRACKER_*`` variable are dropped before merging.
        """
        yaml_values = ConfigLoader._load_yaml(ConfigLoader._settings_path())
        layered = {
            key: value
            for key, value in yaml_values.items()
            if f"{ENV_PREFIX}{key.upper()}" not in os.environ
        }
        layered.update(overrides)
        return Settings(**layered)
