"""
Status flow

Read-only: stored config and session state plus a live sync query.
Diagnose additionally probes SSH instead of trusting the session record.
"""
import os
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ...core.duration import format_duration
from ...core.interfaces import SshClient, SyncEngine
from ...core.logging import get_logger
from ...core.paths import canonical_path
from ...infrastructure.ssh.host_config import SshHostConfig
from ...infrastructure.state.connection_store import ConnectionStore
from ...infrastructure.state.session_store import SessionStore
from ..hostspec import derive_alias
from ..models import ConnectionConfig, ProbeResult, SyncStatus, now_ms

logger = get_logger(__name__)


@dataclass
class StatusReport:
    connected: bool
    host: Optional[str] = None
    port: Optional[int] = None
    local_path: Optional[str] = None
    remote_path: Optional[str] = None
    sync_status: Optional[str] = None
    session_duration: Optional[str] = None
    idle_timeout: Optional[int] = None
    conflicts: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """camelCase keys for --json; unset fields are omitted"""
        data: Dict[str, Any] = {"connected": self.connected}
        optional = {
            "host": self.host,
            "port": self.port,
            "localPath": self.local_path,
            "remotePath": self.remote_path,
            "syncStatus": self.sync_status,
            "sessionDuration": self.session_duration,
            "idleTimeout": self.idle_timeout,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.host is not None:
            data["conflicts"] = list(self.conflicts)
            data["errors"] = list(self.errors)
        return data


@dataclass
class Diagnosis:
    local_path: str
    config: Optional[ConnectionConfig] = None
    alias: Optional[str] = None
    host_entry: Optional[Dict[str, Any]] = None
    include_ok: bool = False
    probe: Optional[ProbeResult] = None
    sync: Optional[SyncStatus] = None


class StatusFlow:
    """Status composition, watch loop and diagnostics"""

    def __init__(
        self,
        connections: ConnectionStore,
        sessions: SessionStore,
        sync_engine: SyncEngine,
        ssh: Optional[SshClient] = None,
        host_config: Optional[SshHostConfig] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.connections = connections
        self.sessions = sessions
        self.sync_engine = sync_engine
        self.ssh = ssh
        self.host_config = host_config
        self.clock = clock

    def _find(self, path: Optional[str], cwd: Optional[str]):
        start = canonical_path(path or cwd or os.getcwd())
        return start, self.connections.find_ancestor(start)

    def collect(self, path: Optional[str] = None, cwd: Optional[str] = None) -> StatusReport:
        """Snapshot for path (or cwd), searching upward for the connection"""
        _, found = self._find(path, cwd)
        if found is None:
            return StatusReport(connected=False)

        local_path, config = found
        session = self.sessions.get(local_path)
        sync = self.sync_engine.status(local_path)

        report = StatusReport(
            connected=bool(session and session.connected),
            host=config.host,
            port=config.port,
            local_path=local_path,
            remote_path=config.remote_path,
            sync_status=sync.status,
            conflicts=sync.conflicts,
            errors=sync.errors,
        )
        if session is not None:
            report.session_duration = format_duration(max(0, self.clock() - session.start_time))
            report.idle_timeout = session.idle_timeout
        return report

    def diagnose(self, path: Optional[str] = None, cwd: Optional[str] = None) -> Diagnosis:
        """Live probe plus sync query, ignoring cached session state"""
        start, found = self._find(path, cwd)
        if found is None:
            return Diagnosis(local_path=start)

        local_path, config = found
        alias = config.ssh_alias or derive_alias(config.host, config.port)
        diagnosis = Diagnosis(local_path=local_path, config=config, alias=alias)

        if self.host_config is not None:
            diagnosis.include_ok = self.host_config.has_include()
            diagnosis.host_entry = self.host_config.lookup(alias)
        if self.ssh is not None:
            diagnosis.probe = self.ssh.probe(alias)
        diagnosis.sync = self.sync_engine.status(local_path)
        return diagnosis

    def watch(
        self,
        render: Callable[[StatusReport], None],
        path: Optional[str] = None,
        cwd: Optional[str] = None,
        interval: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        max_iterations: Optional[int] = None,
    ) -> int:
        """
        Poll, render, sleep until interrupted.

        Args:
            render: Called with each fresh report
            interval: Seconds between polls
            sleep: Injectable for tests
            max_iterations: Stop after this many renders (None: forever)

        Returns:
            Number of renders performed
        """
        count = 0
        try:
            while max_iterations is None or count < max_iterations:
                render(self.collect(path, cwd))
                count += 1
                if max_iterations is not None and count >= max_iterations:
                    break
                sleep(interval)
        except KeyboardInterrupt:
            logger.debug("Watch interrupted after %d refreshes", count)
        return count
