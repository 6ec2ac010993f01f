from __future__ import annotations

import re

import pytest

from haven.domain.hostspec import (
    HostSpec,
    build_ssh_string,
    derive_alias,
    parse_host_spec,
    workspace_url,
)
from haven.domain.models import ConnectionConfig


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("alice@10.0.0.5:2222", HostSpec("alice", "10.0.0.5", 2222)),
        ("bob@box.example.com", HostSpec("bob", "box.example.com", 22)),
        ("box.example.com", HostSpec("abc", "box.example.com", 22)),
        ("myproject-alice", HostSpec("abc", "ssh-myproject-alice.envhaven.app", 22)),
    ],
)
def test_parse_host_spec(text: str, expected: HostSpec) -> None:
    assert parse_host_spec(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "alice@host:0", "alice@host:70000", "alice@host:abc", "-bad.example.com", "host:22", "a b"],
)
def test_parse_host_spec_rejects(text: str) -> None:
    assert parse_host_spec(text) is None


def test_parse_host_spec_uses_custom_defaults() -> None:
    spec = parse_host_spec("dev", default_user="root", managed_domain="example.dev")
    assert spec == HostSpec("root", "ssh-dev.example.dev", 22)


def test_build_ssh_string_round_trips() -> None:
    default_port = ConnectionConfig(host="box.example.com", port=22, user="bob", remote_path="/w")
    assert build_ssh_string(default_port) == "bob@box.example.com"

    custom = ConnectionConfig(host="10.0.0.5", port=2222, user="alice", remote_path="/w")
    rendered = build_ssh_string(custom)
    assert rendered == "alice@10.0.0.5 -p 2222"
    user_host, _, port = rendered.partition(" -p ")
    assert parse_host_spec(f"{user_host}:{port}") == HostSpec("alice", "10.0.0.5", 2222)


def test_derive_alias_is_deterministic_and_distinct() -> None:
    alias = derive_alias("10.0.0.5", 2222)
    assert re.fullmatch(r"haven-[0-9a-z]+", alias)
    assert derive_alias("10.0.0.5", 2222) == alias
    assert derive_alias("10.0.0.5", 22) != alias
    assert derive_alias("10.0.0.6", 2222) != alias


def test_workspace_url() -> None:
    assert workspace_url("myproject") == "https://myproject.envhaven.app"
    assert workspace_url("ssh-myproject.envhaven.app") == "https://myproject.envhaven.app"
    assert workspace_url("alice@10.0.0.5") is None
    assert workspace_url("box.example.com") is None
    assert workspace_url(None) is None
