"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.constants import ENV_PREFIX
from ...core.exceptions import ConfigError


# Environment variable (without prefix) -> config key, dotted keys are nested
ENV_MAPPINGS = {
    "HOST": "host",
    "USER": "user",
    "PORT": "port",
    "KEY": "key",
    "PASSWORD": "password",
    "TIMEOUT": "timeout",
    "PTY_TYPE": "shell.pty_type",
    "VERBOSE": "shell.verbose",
    "IGNORE_TIMEOUT": "shell.ignore_timeout",
    "MAX_WAIT": "shell.max_wait_seconds",
    "POLL_INTERVAL": "shell.poll_interval",
    "SESSION_TIMEOUT_MS": "shell.session_timeout_ms",
    "KEEPALIVE_INTERVAL_MS": "shell.keepalive_interval_ms",
    "KEEPALIVE_MAX_MISSED": "shell.keepalive_max_missed",
}


class ConfigLoader:
    """Configuration loader with priority support"""

    def __init__(self, env_prefix: str = ENV_PREFIX):
        self._env_prefix = env_prefix

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML configuration file"""
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            return tomllib.loads(path.read_text(encoding='utf-8'))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}") from e

    def load_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        config: Dict[str, Any] = {}

        for env_suffix, config_key in ENV_MAPPINGS.items():
            value = os.getenv(self._env_prefix + env_suffix)
            if not value:
                continue
            # Handle nested keys
            if "." in config_key:
                section, key = config_key.split(".", 1)
                config.setdefault(section, {})[key] = self._convert_value(value)
            else:
                config[config_key] = self._convert_value(value)

        return config

    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type"""
        # Try boolean
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        # Try number
        for number_type in (int, float):
            try:
                return number_type(value)
            except ValueError:
                pass

        # Return as string
        return value

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones.
        """
        result: Dict[str, Any] = {}

        for config in configs:
            result = self._deep_merge(result, config)

        return result

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: CLI > env > TOML > defaults

        Args:
            toml_path: Path to TOML configuration file
            cli_overrides: CLI parameter overrides (None values are ignored)
            use_env: Whether to load from environment variables

        Returns:
            Merged configuration dictionary
        """
        configs = []

        # 1. Load TOML if provided
        if toml_path:
            configs.append(self.load_toml(toml_path))

        # 2. Load environment variables
        if use_env:
            env_config = self.load_env()
            if env_config:
                configs.append(env_config)

        # 3. Apply CLI overrides (highest priority)
        if cli_overrides:
            configs.append(_drop_none(cli_overrides))

        # Merge all configs
        return self.merge_configs(*configs)


def _drop_none(config: Dict[str, Any]) -> Dict[str, Any]:
    """Remove unset CLI options so they don't mask lower-priority sources"""
    result: Dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, dict):
            nested = _drop_none(value)
            if nested:
                result[key] = nested
        elif value is not None:
            result[key] = value
    return result
