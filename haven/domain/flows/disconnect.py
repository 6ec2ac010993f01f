"""
Disconnect flow

Every step is best effort: a failing flush or stop is reported and the
flow carries on, and the session record is always removed.
"""
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ...core.interfaces import PromptProvider, SshClient, SyncEngine
from ...core.logging import get_logger
from ...core.paths import canonical_path, contract_path
from ...infrastructure.ssh.host_config import SshHostConfig
from ...infrastructure.state.connection_store import ConnectionStore
from ...infrastructure.state.session_store import SessionStore
from ..hostspec import derive_alias
from ..models import ConnectionConfig

logger = get_logger(__name__)


@dataclass
class DisconnectResult:
    local_path: str
    config: Optional[ConnectionConfig] = None
    had_session: bool = False
    forgotten: bool = False
    warnings: List[str] = field(default_factory=list)


class DisconnectFlow:
    """Flush, stop sync, close the SSH master and clear the session"""

    def __init__(
        self,
        connections: ConnectionStore,
        sessions: SessionStore,
        ssh: SshClient,
        sync_engine: SyncEngine,
        prompts: PromptProvider,
        host_config: Optional[SshHostConfig] = None,
    ):
        self.connections = connections
        self.sessions = sessions
        self.ssh = ssh
        self.sync_engine = sync_engine
        self.prompts = prompts
        self.host_config = host_config

    def resolve_target(self, path: Optional[str] = None, cwd: Optional[str] = None):
        """
        Connected directory for path (or cwd), searching upward.

        Returns:
            (local_path, config); config is None when nothing is stored
        """
        start = canonical_path(path or cwd or os.getcwd())
        found = self.connections.find_ancestor(start)
        if found:
            return found
        return start, None

    def _step(self, result: DisconnectResult, label: str, action: Callable[[], None]) -> None:
        try:
            action()
        except Exception as e:
            logger.warning("%s failed: %s", label, e)
            message = f"{label} failed: {e}"
            result.warnings.append(message)
            self.prompts.warning(message)

    def run(self, path: Optional[str] = None, cwd: Optional[str] = None, forget: bool = False) -> DisconnectResult:
        local_path, config = self.resolve_target(path, cwd)
        result = DisconnectResult(local_path=local_path, config=config)
        result.had_session = self.sessions.get(local_path) is not None

        if config is None:
            self.prompts.warning(f"No connection configured for {contract_path(local_path)}")

        if self.sync_engine.is_installed():
            self.prompts.info("Flushing pending changes...")
            self._step(result, "Sync flush", lambda: self.sync_engine.flush(local_path))
            self._step(result, "Sync stop", lambda: self.sync_engine.stop(local_path))

        alias = None
        if config is not None:
            alias = config.ssh_alias or derive_alias(config.host, config.port)
            self._step(result, "Closing SSH connection", lambda: self.ssh.close_control_master(alias))

        self.sessions.delete(local_path)

        if forget and config is not None:
            self._forget(result, alias)

        self.prompts.success(f"Disconnected {contract_path(local_path)}")
        return result

    def _forget(self, result: DisconnectResult, alias: str) -> None:
        """Drop the stored target; the Host block goes when no other directory uses it"""
        self.connections.delete(result.local_path)
        result.forgotten = True

        shared = any(
            (other.ssh_alias or derive_alias(other.host, other.port)) == alias
            for _, other in self.connections.list()
        )
        if self.host_config is not None and not shared:
            self._step(result, "Removing SSH host entry", lambda: self.host_config.remove_alias(alias))
        self.prompts.info(f"Forgot connection for {contract_path(result.local_path)}")
