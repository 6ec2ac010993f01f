from __future__ import annotations

from pathlib import Path

import pytest

from haven.adapters.config.loader import ConfigLoader, load_settings
from haven.core.exceptions import ConfigError
from haven.core.settings import Settings, default_config_dir, default_data_dir


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "HAVEN_SSH_DIR",
        "HAVEN_MANAGED_DOMAIN",
        "HAVEN_DEFAULT_USER",
        "HAVEN_REMOTE_ROOT",
        "HAVEN_MUTAGEN_VERSION",
        "HAVEN_PROBE_TIMEOUT",
        "HAVEN_WATCH_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


def test_default_directories_follow_xdg(tmp_path: Path) -> None:
    assert default_config_dir() == (tmp_path / "xdg-config").resolve() / "haven"
    assert default_data_dir() == (tmp_path / "xdg-data").resolve() / "haven"


def test_default_directories_without_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("XDG_CONFIG_HOME")
    monkeypatch.delenv("XDG_DATA_HOME")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_config_dir() == tmp_path / ".config" / "haven"
    assert default_data_dir() == tmp_path / ".local" / "share" / "haven"


def test_settings_defaults() -> None:
    settings = Settings.from_dict({})
    assert settings.managed_domain == "envhaven.app"
    assert settings.default_user == "abc"
    assert settings.remote_root == "/config/workspace"
    assert settings.mutagen_version == "0.17.6"
    assert settings.probe_timeout == 10
    assert settings.watch_interval == 2.0


def test_settings_reject_bad_values() -> None:
    with pytest.raises(ConfigError):
        Settings.from_dict({"probe_timeout": "soon"})
    with pytest.raises(ConfigError):
        Settings.from_dict({"remote_root": "relative/path"})
    with pytest.raises(ConfigError):
        Settings.from_dict({"watch_interval": 0})


def test_loader_priority(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    toml_path = tmp_path / "config.toml"
    toml_path.write_text(
        'default_user = "toml-user"\nremote_root = "/srv/toml"\nprobe_timeout = 4\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("HAVEN_REMOTE_ROOT", "/srv/env")
    monkeypatch.setenv("HAVEN_PROBE_TIMEOUT", "6")

    merged = ConfigLoader().load(toml_path=toml_path, cli_overrides={"probe_timeout": 8, "ssh_dir": None})

    assert merged["default_user"] == "toml-user"
    assert merged["remote_root"] == "/srv/env"
    assert merged["probe_timeout"] == 8
    assert "ssh_dir" not in merged


def test_load_env_reads_prefixed_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HAVEN_SSH_DIR", "/tmp/keys")
    monkeypatch.setenv("HAVEN_WATCH_INTERVAL", "5")
    monkeypatch.setenv("HAVEN_IDLE_TIMEOUT", "30m")
    monkeypatch.delenv("HAVEN_DEFAULT_USER", raising=False)

    env = ConfigLoader().load_env()

    assert env["ssh_dir"] == "/tmp/keys"
    assert env["watch_interval"] == "5"
    assert "default_user" not in env
    assert "idle_timeout" not in env


def test_loader_missing_and_malformed_toml(tmp_path: Path) -> None:
    loader = ConfigLoader()
    assert loader.load_toml(tmp_path / "absent.toml") == {}

    broken = tmp_path / "broken.toml"
    broken.write_text("default_user = \n", encoding="utf-8")
    with pytest.raises(ConfigError):
        loader.load_toml(broken)


def test_load_settings_reads_config_dir_toml(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_dir = tmp_path / "xdg-config" / "haven"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text('managed_domain = "example.dev"\n', encoding="utf-8")
    monkeypatch.setenv("HAVEN_WATCH_INTERVAL", "0.5")

    settings = load_settings()

    assert settings.managed_domain == "example.dev"
    assert settings.watch_interval == 0.5
    assert settings.config_dir == config_dir.resolve()
