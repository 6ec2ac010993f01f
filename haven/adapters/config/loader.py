"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from ...core.constants import SETTINGS_FILE
from ...core.exceptions import ConfigError
from ...core.settings import Settings, default_config_dir


class ConfigLoader:
    """Configuration loader with priority support"""

    def __init__(self):
        self._env_prefix = "HAVEN_"

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML configuration file; a missing file is an empty config"""
        if not path.exists():
            return {}

        try:
            return tomllib.loads(path.read_text(encoding="utf-8"))
        except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to parse TOML configuration {path}: {e}") from e

    def load_env(self) -> Dict[str, Any]:
        """Load configuration from HAVEN_<KEY> environment variables"""
        config = {}

        # HAVEN_IDLE_TIMEOUT is read on the remote side only
        env_keys = [
            "ssh_dir",
            "managed_domain",
            "default_user",
            "remote_root",
            "mutagen_version",
            "probe_timeout",
            "watch_interval",
        ]

        for config_key in env_keys:
            value = os.getenv(f"{self._env_prefix}{config_key.upper()}")
            if value:
                config[config_key] = value

        return config

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones; None values never override.
        """
        result: Dict[str, Any] = {}
        for config in configs:
            for key, value in config.items():
                if value is not None:
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
                (default: <config_dir>/config.toml)
            cli_overrides: CLI parameter overrides
            use_env: Whether to load from environment variables

        Returns:
            Merged configuration dictionary
        """
        if toml_path is None:
            toml_path = default_config_dir() / SETTINGS_FILE

        configs = [self.load_toml(toml_path)]

        if use_env:
            configs.append(self.load_env())

        if cli_overrides:
            configs.append(cli_overrides)

        return self.merge_configs(*configs)


def load_settings(cli_overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """Resolve Settings for this invocation"""
    return Settings.from_dict(ConfigLoader().load(cli_overrides=cli_overrides))
