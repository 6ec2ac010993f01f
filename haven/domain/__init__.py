"""
Domain layer: models, host-spec grammar and orchestration flows
"""
from .models import ConnectionConfig, SessionState, SshKeyInfo, ProbeResult, SyncStatus
from .hostspec import HostSpec, parse_host_spec, derive_alias, build_ssh_string, workspace_url

__all__ = [
    "ConnectionConfig",
    "SessionState",
    "SshKeyInfo",
    "ProbeResult",
    "SyncStatus",
    "HostSpec",
    "parse_host_spec",
    "derive_alias",
    "build_ssh_string",
    "workspace_url",
]
