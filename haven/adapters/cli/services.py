"""
Service wiring for CLI commands
"""
from dataclasses import dataclass
from typing import Optional

from ...core.interfaces import PromptProvider, SshClient, SyncEngine
from ...core.settings import Settings
from ...infrastructure.ssh import OpenSshClient, SshHostConfig, SshIdentity
from ...infrastructure.state import ConnectionStore, SessionStore
from ...infrastructure.sync import MutagenEngine, MutagenInstaller
from .prompts import RichPromptProvider


@dataclass
class Services:
    settings: Settings
    connections: ConnectionStore
    sessions: SessionStore
    identity: SshIdentity
    host_config: SshHostConfig
    ssh: SshClient
    sync_engine: SyncEngine
    prompts: PromptProvider


def build_services(settings: Settings, prompts: Optional[PromptProvider] = None) -> Services:
    """Production collaborators for one invocation"""
    identity = SshIdentity(settings.ssh_dir)
    installer = MutagenInstaller(settings.data_dir, version=settings.mutagen_version)
    return Services(
        settings=settings,
        connections=ConnectionStore.at(settings.config_dir),
        sessions=SessionStore.at(settings.config_dir),
        identity=identity,
        host_config=SshHostConfig(settings.ssh_dir, identity),
        ssh=OpenSshClient(settings.ssh_dir, probe_timeout=settings.probe_timeout),
        sync_engine=MutagenEngine(installer),
        prompts=prompts or RichPromptProvider(),
    )
