"""
Connection domain models
"""
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.constants import HOST_KEY_FAILURE_PHRASE
from ..core.exceptions import InputError


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    """Integer field or None; bools and strings are rejected"""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


@dataclass
class ConnectionConfig:
    """
    Remote target for one local directory.

    Serialized with the camelCase keys used by connections.json.
    """
    host: str
    port: int
    user: str
    remote_path: str
    ssh_alias: Optional[str] = None
    last_connected: Optional[int] = None

    def validate(self) -> None:
        """Validate configuration"""
        if not self.host:
            raise InputError("Host must not be empty")
        if not (1 <= self.port <= 65535):
            raise InputError(f"Invalid port: {self.port}")
        if not self.remote_path.startswith("/"):
            raise InputError(f"Remote path must be absolute: {self.remote_path}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "remotePath": self.remote_path,
        }
        if self.ssh_alias is not None:
            data["sshAlias"] = self.ssh_alias
        if self.last_connected is not None:
            data["lastConnected"] = self.last_connected
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionConfig":
        """Create from dictionary"""
        return cls(
            host=str(data["host"]),
            port=int(data["port"]),
            user=str(data["user"]),
            remote_path=str(data["remotePath"]),
            ssh_alias=data.get("sshAlias"),
            last_connected=_optional_int(data, "lastConnected"),
        )


@dataclass
class SessionState:
    """Ephemeral per-directory session record"""
    connected: bool
    start_time: int
    idle_timeout: Optional[int] = None
    sync_session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data: Dict[str, Any] = {
            "connected": self.connected,
            "startTime": self.start_time,
        }
        if self.idle_timeout is not None:
            data["idleTimeout"] = self.idle_timeout
        if self.sync_session_id is not None:
            data["mutagenSessionId"] = self.sync_session_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        """
        Create from dictionary.

        Raises:
            ValueError: If a field has the wrong type
        """
        connected = data["connected"]
        if not isinstance(connected, bool):
            raise ValueError(f"connected must be a boolean, got {connected!r}")
        start_time = _optional_int(data, "startTime")
        if start_time is None:
            raise KeyError("startTime")
        return cls(
            connected=connected,
            start_time=start_time,
            idle_timeout=_optional_int(data, "idleTimeout"),
            sync_session_id=data.get("mutagenSessionId"),
        )


@dataclass(frozen=True)
class SshKeyInfo:
    """Private/public key pair on disk"""
    private_key_path: str
    public_key_path: str
    public_key: str


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of an SSH reachability probe"""
    success: bool
    error: Optional[str] = None

    @property
    def host_key_mismatch(self) -> bool:
        return bool(self.error) and HOST_KEY_FAILURE_PHRASE in self.error


@dataclass
class SyncStatus:
    """Sync session snapshot"""
    status: str
    conflicts: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
