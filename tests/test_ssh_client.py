from __future__ import annotations

import subprocess
from pathlib import Path

from conftest import FakeRunner
from haven.infrastructure.ssh import OpenSshClient


def test_probe_success(tmp_path: Path) -> None:
    runner = FakeRunner(stdout="ok\n")
    client = OpenSshClient(tmp_path, probe_timeout=7, runner=runner)

    result = client.probe("haven-abc")

    assert result.success is True
    assert runner.calls == [
        ["ssh", "-o", "BatchMode=yes", "-o", "ConnectTimeout=7", "haven-abc", "echo", "ok"]
    ]
    assert runner.kwargs[0]["timeout"] == 12


def test_probe_failure_keeps_diagnostic(tmp_path: Path) -> None:
    runner = FakeRunner(returncode=255, stderr="Host key verification failed.\n")
    result = OpenSshClient(tmp_path, runner=runner).probe("haven-abc")
    assert result.success is False
    assert result.error == "Host key verification failed."
    assert result.host_key_mismatch is True


def test_probe_timeout(tmp_path: Path) -> None:
    def slow(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    result = OpenSshClient(tmp_path, runner=slow).probe("haven-abc")
    assert result.success is False
    assert "timed out" in result.error
    assert result.host_key_mismatch is False


def test_query_remote_env(tmp_path: Path) -> None:
    runner = FakeRunner(stdout="30m\n")
    client = OpenSshClient(tmp_path, runner=runner)
    assert client.query_remote_env("haven-abc", "HAVEN_IDLE_TIMEOUT") == "30m"
    assert runner.calls[0][-2:] == ["printenv", "HAVEN_IDLE_TIMEOUT"]

    assert OpenSshClient(tmp_path, runner=FakeRunner(returncode=1)).query_remote_env("a", "X") is None
    assert OpenSshClient(tmp_path, runner=FakeRunner(stdout="\n")).query_remote_env("a", "X") is None


def test_forget_host_key(tmp_path: Path) -> None:
    runner = FakeRunner()
    client = OpenSshClient(tmp_path, runner=runner)

    client.forget_host_key("10.0.0.5", 2222)
    assert runner.calls == []

    (tmp_path / "known_hosts").write_text("", encoding="utf-8")
    client.forget_host_key("10.0.0.5", 2222)
    client.forget_host_key("box.example.com", 22)
    known_hosts = str(tmp_path / "known_hosts")
    assert runner.calls == [
        ["ssh-keygen", "-R", "[10.0.0.5]:2222", "-f", known_hosts],
        ["ssh-keygen", "-R", "box.example.com", "-f", known_hosts],
    ]


def test_close_control_master_and_run(tmp_path: Path) -> None:
    runner = FakeRunner(returncode=3)
    client = OpenSshClient(tmp_path, runner=runner)

    client.close_control_master("haven-abc")
    assert client.run("haven-abc", "ls", tty=True) == 3
    assert client.run("haven-abc", "ls") == 3

    assert runner.calls == [
        ["ssh", "-O", "exit", "haven-abc"],
        ["ssh", "-t", "haven-abc", "ls"],
        ["ssh", "haven-abc", "ls"],
    ]
