"""Configuration parser for SQLBridge connection profiles."""

import os
import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from sqlbridge.config.models import BridgeConfig, EnvironmentSettings
from sqlbridge.exceptions import ConfigurationError


class ConfigParser:
    """Profile file parser with environment variable interpolation."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')

    DEFAULT_LOCATIONS = (
        Path("sqlbridge.yaml"),
        Path("sqlbridge.yml"),
        Path("config") / "sqlbridge.yaml",
    )

    def __init__(self, env_settings: Optional[EnvironmentSettings] = None) -> None:
        self.env_settings = env_settings or EnvironmentSettings()

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> BridgeConfig:
        """Load and validate connection profiles from a YAML file.

        Args:
            config_path: Path to the profile file. If None, looks in default locations.

        Returns:
            Validated BridgeConfig instance.

        Raises:
            ConfigurationError: If the file is missing, malformed, or invalid.
        """
        config_file = self._find_config_file(config_path)

        try:
            with open(config_file, 'r', encoding='utf-8') as file:
                raw_config = yaml.safe_load(file)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file '{config_file}' not found") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in '{config_file}': {e}") from e

        if not raw_config:
            raise ConfigurationError(f"Configuration file '{config_file}' is empty")

        try:
            return BridgeConfig(**self._process_env_vars(raw_config))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def _find_config_file(self, config_path: Optional[Union[str, Path]]) -> Path:
        if config_path:
            path = Path(config_path)
            if path.exists():
                return path
            raise ConfigurationError(f"Configuration file '{config_path}' not found")

        if self.env_settings.config_file:
            path = Path(self.env_settings.config_file)
            if path.exists():
                return path

        candidates = [Path.cwd() / location for location in self.DEFAULT_LOCATIONS]
        for location in candidates:
            if location.exists():
                return location

        raise ConfigurationError(
            f"No configuration file found in default locations: {[str(c) for c in candidates]}"
        )

    def _process_env_vars(self, config: Any) -> Any:
        """Recursively resolve ${VAR} and ${VAR:-default} references."""
        if isinstance(config, dict):
            return {key: self._process_env_vars(value) for key, value in config.items()}
        if isinstance(config, list):
            return [self._process_env_vars(item) for item in config]
        if isinstance(config, str):
            return self._substitute_env_vars(config)
        return config

    def _substitute_env_vars(self, value: str) -> str:
        def replace_var(match):
            var_expr = match.group(1)

            if ':-' in var_expr:
                var_name, default = var_expr.split(':-', 1)
                return os.getenv(var_name.strip(), default.strip())

            var_name = var_expr.strip()
            env_value = os.getenv(var_name)
            if env_value is None:
                raise ConfigurationError(f"Required environment variable '{var_name}' is not set")
            return env_value

        return self.ENV_VAR_PATTERN.sub(replace_var, value)

    def create_sample_config(self, output_path: Union[str, Path]) -> None:
        """Write a sample profile file covering all three engines."""
        sample_config = {
            'databases': {
                'local': {
                    'type': 'sqlite',
                    'path': './local.db',
                },
                'dev': {
                    'type': 'postgresql',
                    'host': 'localhost',
                    'port': 5432,
                    'database': 'app_dev',
                    'username': 'dev_user',
                    'password': '${DEV_DB_PASSWORD:-dev_password}',
                },
                'reporting': {
                    'type': 'mysql',
                    'host': 'localhost',
                    'port': 3306,
                    'database': 'reporting',
                    'username': 'report_user',
                    'password': '${REPORTING_DB_PASSWORD:-}',
                },
            },
            'default_database': 'local',
        }

        with open(output_path, 'w', encoding='utf-8') as file:
            yaml.safe_dump(sample_config, file, default_flow_style=False, sort_keys=False)


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env_settings: Optional[EnvironmentSettings] = None,
) -> BridgeConfig:
    """Load connection profiles from a YAML file."""
    return ConfigParser(env_settings).load_config(config_path)


def create_sample_config(output_path: Union[str, Path]) -> None:
    """Create a sample profile file."""
    ConfigParser().create_sample_config(output_path)
