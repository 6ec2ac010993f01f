from __future__ import annotations

import stat
from pathlib import Path

import pytest

from conftest import FakeRunner, write_key_pair
from haven.infrastructure.ssh import SshHostConfig, SshIdentity


def _host_config(ssh_dir: Path) -> SshHostConfig:
    return SshHostConfig(ssh_dir, SshIdentity(ssh_dir, runner=FakeRunner()))


def test_write_alias_renders_block(tmp_path: Path) -> None:
    ssh_dir = tmp_path / "ssh"
    write_key_pair(ssh_dir, "id_ed25519")
    config = _host_config(ssh_dir)

    path = config.write_alias("haven-abc", "10.0.0.5", 2222, "alice")

    assert path == ssh_dir / "config.d" / "haven.conf"
    assert path.read_text(encoding="utf-8") == (
        "Host haven-abc\n"
        "  HostName 10.0.0.5\n"
        "  Port 2222\n"
        "  User alice\n"
        f"  IdentityFile {ssh_dir / 'id_ed25519'}\n"
        "  ForwardAgent no\n"
        "  ForwardX11 no\n"
        "  StrictHostKeyChecking accept-new\n"
        "  ServerAliveInterval 5\n"
        "  ServerAliveCountMax 3\n"
    )
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert stat.S_IMODE(path.parent.stat().st_mode) == 0o700


def test_write_alias_is_idempotent(tmp_path: Path) -> None:
    config = _host_config(tmp_path / "ssh")
    config.write_alias("haven-abc", "10.0.0.5", 2222, "alice")
    first = config.config_path.read_text(encoding="utf-8")
    config.write_alias("haven-abc", "10.0.0.5", 2222, "alice")
    assert config.config_path.read_text(encoding="utf-8") == first


def test_write_alias_replaces_only_its_block(tmp_path: Path) -> None:
    config = _host_config(tmp_path / "ssh")
    config.config_path.parent.mkdir(parents=True)
    config.config_path.write_text(
        "Host other\n  HostName other.example.com\n\nHost haven-abc-extra\n  Port 9\n",
        encoding="utf-8",
    )

    config.write_alias("haven-abc", "10.0.0.5", 22, "alice")
    config.write_alias("haven-abc", "10.0.0.5", 2222, "alice")

    content = config.config_path.read_text(encoding="utf-8")
    assert content.count("Host haven-abc\n") == 1
    assert "Port 2222" in content
    assert "Port 22\n" not in content
    assert "Host other\n  HostName other.example.com\n" in content
    assert "Host haven-abc-extra\n  Port 9\n" in content


def test_strip_block_stops_at_next_host_or_match() -> None:
    content = "Host a\n  Port 1\nHost b\n  Port 2\nMatch host c\n  Port 3\n"
    assert SshHostConfig.strip_block(content, "b") == "Host a\n  Port 1\nMatch host c\n  Port 3\n"
    assert SshHostConfig.strip_block(content, "missing") == content


def test_remove_alias(tmp_path: Path) -> None:
    config = _host_config(tmp_path / "ssh")
    config.remove_alias("haven-abc")
    assert not config.config_path.exists()

    config.write_alias("haven-abc", "10.0.0.5", 22, "alice")
    config.write_alias("haven-def", "10.0.0.6", 22, "bob")
    config.remove_alias("haven-abc")
    content = config.config_path.read_text(encoding="utf-8")
    assert "Host haven-abc" not in content
    assert content.startswith("Host haven-def\n")

    config.remove_alias("haven-def")
    assert not config.config_path.exists()


def test_has_include(tmp_path: Path) -> None:
    ssh_dir = tmp_path / "ssh"
    config = _host_config(ssh_dir)
    assert config.has_include() is False

    ssh_dir.mkdir(parents=True, exist_ok=True)
    (ssh_dir / "config").write_text("Host *\n  ServerAliveInterval 60\n", encoding="utf-8")
    assert config.has_include() is False

    (ssh_dir / "config").write_text(
        "# personal\nHost *\n  AddKeysToAgent yes\nInclude ~/.ssh/config.d/*\n", encoding="utf-8"
    )
    assert config.has_include() is True
    assert config.include_directive() == "Include ~/.ssh/config.d/*"


def test_lookup_reads_fragment(tmp_path: Path) -> None:
    ssh_dir = tmp_path / "ssh"
    write_key_pair(ssh_dir, "id_ed25519")
    config = _host_config(ssh_dir)
    assert config.lookup("haven-abc") is None

    config.write_alias("haven-abc", "10.0.0.5", 2222, "alice")

    entry = config.lookup("haven-abc")
    assert entry == {
        "host": "10.0.0.5",
        "port": 2222,
        "user": "alice",
        "identity_files": [str(ssh_dir / "id_ed25519")],
    }
    assert config.lookup("haven-zzz") is None


def test_fragment_is_created_owner_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = _host_config(tmp_path / "ssh")
    monkeypatch.setattr(Path, "chmod", lambda self, mode: None)

    path = config.write_alias("haven-abc", "10.0.0.5", 2222, "alice")

    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_has_include_ignores_keyword_case(tmp_path: Path) -> None:
    ssh_dir = tmp_path / "ssh"
    ssh_dir.mkdir()
    (ssh_dir / "config").write_text("include ~/.ssh/config.d/*\nHost *\n", encoding="utf-8")

    assert _host_config(ssh_dir).has_include() is True
