"""
Runtime settings
"""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    APP_NAME,
    DEFAULT_MANAGED_DOMAIN,
    DEFAULT_MUTAGEN_VERSION,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_REMOTE_ROOT,
    DEFAULT_SSH_DIR,
    DEFAULT_USER,
    DEFAULT_WATCH_INTERVAL,
)
from .exceptions import ConfigError


def default_config_dir() -> Path:
    """$XDG_CONFIG_HOME/haven, else ~/.config/haven"""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg).expanduser().resolve() / APP_NAME
    return Path("~/.config").expanduser() / APP_NAME


def default_data_dir() -> Path:
    """$XDG_DATA_HOME/haven, else ~/.local/share/haven"""
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg).expanduser().resolve() / APP_NAME
    return Path("~/.local/share").expanduser() / APP_NAME


@dataclass
class Settings:
    """Resolved configuration for one CLI invocation"""
    config_dir: Path
    data_dir: Path
    ssh_dir: Path
    managed_domain: str = DEFAULT_MANAGED_DOMAIN
    default_user: str = DEFAULT_USER
    remote_root: str = DEFAULT_REMOTE_ROOT
    mutagen_version: str = DEFAULT_MUTAGEN_VERSION
    probe_timeout: int = DEFAULT_PROBE_TIMEOUT
    watch_interval: float = DEFAULT_WATCH_INTERVAL

    def validate(self) -> None:
        """Validate configuration"""
        if self.probe_timeout < 1:
            raise ConfigError(f"Invalid probe_timeout: {self.probe_timeout}")
        if self.watch_interval <= 0:
            raise ConfigError(f"Invalid watch_interval: {self.watch_interval}")
        if not self.remote_root.startswith("/"):
            raise ConfigError(f"remote_root must be absolute: {self.remote_root}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "Settings":
        """
        Build settings from a merged configuration dictionary.

        Unknown keys are ignored; missing directories fall back to the
        XDG defaults.

        Raises:
            ConfigError: If a value has the wrong type
        """
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and v is not None}

        try:
            settings = cls(
                config_dir=Path(values.pop("config_dir", default_config_dir())).expanduser(),
                data_dir=Path(values.pop("data_dir", default_data_dir())).expanduser(),
                ssh_dir=Path(values.pop("ssh_dir", DEFAULT_SSH_DIR)).expanduser(),
                **values,
            )
            settings.probe_timeout = int(settings.probe_timeout)
            settings.watch_interval = float(settings.watch_interval)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        settings.validate()
        return settings
