from __future__ import annotations

import base64
import struct
import subprocess
from pathlib import Path
from typing import Callable, Optional

import pytest

from haven.core.interfaces import PromptProvider, SshClient, SyncEngine
from haven.core.settings import Settings
from haven.domain.models import ProbeResult, SyncStatus
from haven.infrastructure.ssh import SshHostConfig, SshIdentity
from haven.infrastructure.state import ConnectionStore, SessionStore


def make_public_key(seed: int = 1, comment: str = "test@host") -> str:
    """Well-formed ssh-ed25519 public key line"""
    blob = struct.pack(">I", 11) + b"ssh-ed25519" + struct.pack(">I", 32) + bytes([seed]) * 32
    return f"ssh-ed25519 {base64.b64encode(blob).decode('ascii')} {comment}"


def write_key_pair(ssh_dir: Path, name: str, seed: int = 1) -> str:
    ssh_dir.mkdir(parents=True, exist_ok=True)
    public_key = make_public_key(seed, comment=name)
    (ssh_dir / name).write_text("PRIVATE\n", encoding="utf-8")
    (ssh_dir / f"{name}.pub").write_text(public_key + "\n", encoding="utf-8")
    return public_key


class FakeRunner:
    """subprocess.run stand-in that records argv"""

    def __init__(
        self,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        on_call: Optional[Callable[[list], Optional[subprocess.CompletedProcess]]] = None,
    ):
        self.calls: list[list[str]] = []
        self.kwargs: list[dict] = []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.on_call = on_call

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        if self.on_call is not None:
            result = self.on_call(list(cmd))
            if result is not None:
                return result
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


def keygen_runner(returncode: int = 0, stderr: str = "") -> FakeRunner:
    """Runner whose ssh-keygen writes a key pair at the -f path"""

    def on_call(cmd):
        if cmd[0] == "ssh-keygen" and "-f" in cmd and returncode == 0:
            private_key = Path(cmd[cmd.index("-f") + 1])
            private_key.write_text("PRIVATE\n", encoding="utf-8")
            Path(f"{private_key}.pub").write_text(
                make_public_key(7, comment=cmd[cmd.index("-C") + 1]) + "\n", encoding="utf-8"
            )
        return None

    return FakeRunner(returncode=returncode, stderr=stderr, on_call=on_call)


class FakeSshClient(SshClient):
    def __init__(self, probes: Optional[list[ProbeResult]] = None, env: Optional[dict] = None):
        self.probes = list(probes or [ProbeResult(success=True)])
        self.env = dict(env or {})
        self.probed: list[str] = []
        self.forgotten: list[tuple[str, int]] = []
        self.closed: list[str] = []
        self.commands: list[tuple[str, str, bool]] = []
        self.exit_code = 0
        self.close_error: Optional[Exception] = None

    def probe(self, alias: str) -> ProbeResult:
        self.probed.append(alias)
        if len(self.probes) > 1:
            return self.probes.pop(0)
        return self.probes[0]

    def query_remote_env(self, alias: str, name: str) -> Optional[str]:
        return self.env.get(name)

    def forget_host_key(self, host: str, port: int) -> None:
        self.forgotten.append((host, port))

    def close_control_master(self, alias: str) -> None:
        self.closed.append(alias)
        if self.close_error is not None:
            raise self.close_error

    def run(self, alias: str, command: str, tty: bool = False) -> int:
        self.commands.append((alias, command, tty))
        return self.exit_code


class FakeSyncEngine(SyncEngine):
    def __init__(self, installed: bool = True):
        self.installed = installed
        self.started: list[tuple[str, str, str]] = []
        self.stopped: list[str] = []
        self.flushed: list[str] = []
        self.start_error: Optional[Exception] = None
        self.stop_error: Optional[Exception] = None
        self.flush_error: Optional[Exception] = None
        self.current = SyncStatus(status="watching")

    def is_installed(self) -> bool:
        return self.installed

    def ensure_installed(self, on_progress=None) -> Path:
        self.installed = True
        return Path("/fake/mutagen")

    def start(self, local_path, alias, config, on_progress=None) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.installed = True
        self.started.append((local_path, alias, config.remote_path))

    def stop(self, local_path: str) -> None:
        self.stopped.append(local_path)
        if self.stop_error is not None:
            raise self.stop_error

    def flush(self, local_path: str) -> None:
        self.flushed.append(local_path)
        if self.flush_error is not None:
            raise self.flush_error

    def status(self, local_path: str) -> SyncStatus:
        return self.current


class FakePrompts(PromptProvider):
    """Scripted answers; every message is recorded as (kind, text)"""

    def __init__(self, answers: Optional[list[str]] = None):
        self.answers = list(answers or [])
        self.asked: list[str] = []
        self.messages: list[tuple[str, str]] = []

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        self.asked.append(message)
        if self.answers:
            return self.answers.pop(0)
        return default or ""

    def confirm(self, message: str, default: bool = False) -> bool:
        self.asked.append(message)
        return default

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def panel(self, content: str, title: str = "", border_style: str = "blue") -> None:
        self.messages.append(("panel", f"{title}\n{content}"))

    def text(self) -> str:
        return "\n".join(text for _, text in self.messages)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        ssh_dir=tmp_path / "ssh",
    )


@pytest.fixture
def connections(settings: Settings) -> ConnectionStore:
    return ConnectionStore.at(settings.config_dir)


@pytest.fixture
def sessions(settings: Settings) -> SessionStore:
    return SessionStore.at(settings.config_dir)


@pytest.fixture
def identity(settings: Settings) -> SshIdentity:
    return SshIdentity(settings.ssh_dir, runner=keygen_runner())


@pytest.fixture
def host_config(settings: Settings, identity: SshIdentity) -> SshHostConfig:
    return SshHostConfig(settings.ssh_dir, identity)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    path = tmp_path / "work" / "app"
    path.mkdir(parents=True)
    return path
