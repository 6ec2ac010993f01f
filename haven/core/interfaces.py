"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import ConnectionConfig, ProbeResult, SyncStatus


class KeyValueStore(ABC):
    """Minimal embedded key-value storage interface"""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Load the record stored under key, or None"""
        pass

    @abstractmethod
    def put(self, key: str, value: Dict[str, Any]) -> None:
        """Store a record under key, replacing any previous one"""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete the record under key; returns True if one existed"""
        pass

    @abstractmethod
    def list(self) -> List[str]:
        """List all keys"""
        pass


class SshClient(ABC):
    """SSH client capability interface"""

    @abstractmethod
    def probe(self, alias: str) -> "ProbeResult":
        """Non-interactive authenticated round-trip to alias"""
        pass

    @abstractmethod
    def query_remote_env(self, alias: str, name: str) -> Optional[str]:
        """Read one remote environment variable; None on any failure"""
        pass

    @abstractmethod
    def forget_host_key(self, host: str, port: int) -> None:
        """Remove the cached host identity for host:port"""
        pass

    @abstractmethod
    def close_control_master(self, alias: str) -> None:
        """Close a persistent control channel for alias, if any"""
        pass

    @abstractmethod
    def run(self, alias: str, command: str, tty: bool = False) -> int:
        """Run a remote shell command with inherited stdio; returns exit code"""
        pass


class SyncEngine(ABC):
    """File sync engine capability interface"""

    @abstractmethod
    def is_installed(self) -> bool:
        """Whether the engine binary is present"""
        pass

    @abstractmethod
    def ensure_installed(self, on_progress: Optional[Callable[[str], None]] = None) -> Path:
        """Install the engine if missing; returns the binary path"""
        pass

    @abstractmethod
    def start(
        self,
        local_path: str,
        alias: str,
        config: "ConnectionConfig",
        on_progress: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Create or resume the sync session for local_path"""
        pass

    @abstractmethod
    def stop(self, local_path: str) -> None:
        """Terminate the sync session for local_path"""
        pass

    @abstractmethod
    def flush(self, local_path: str) -> None:
        """Wait for in-flight changes of the session to settle"""
        pass

    @abstractmethod
    def status(self, local_path: str) -> "SyncStatus":
        """Query the sync session for local_path"""
        pass


class PromptProvider(ABC):
    """User prompt interface"""

    @abstractmethod
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        pass

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        pass

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def success(self, message: str) -> None:
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass

    @abstractmethod
    def panel(self, content: str, title: str = "", border_style: str = "blue") -> None:
        """Display content in a panel"""
        pass
