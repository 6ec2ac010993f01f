"""
OpenSSH client adapter
"""
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from ...core.constants import DEFAULT_PROBE_TIMEOUT, DEFAULT_SSH_PORT
from ...core.interfaces import SshClient
from ...core.logging import get_logger
from ...domain.models import ProbeResult

logger = get_logger(__name__)


class OpenSshClient(SshClient):
    """
    SshClient backed by the system ``ssh`` and ``ssh-keygen`` binaries.

    Aliases are resolved by ssh itself, so the managed fragment must be
    included from the user's main config.
    """

    def __init__(
        self,
        ssh_dir: Path,
        probe_timeout: int = DEFAULT_PROBE_TIMEOUT,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """
        Args:
            ssh_dir: User ssh directory holding known_hosts
            probe_timeout: ConnectTimeout for probes and queries (seconds)
            runner: subprocess.run compatible callable
        """
        self.ssh_dir = Path(ssh_dir).expanduser()
        self.probe_timeout = probe_timeout
        self._run = runner

    def _batch_args(self, alias: str, *remote: str) -> List[str]:
        return [
            "ssh",
            "-o", "BatchMode=yes",
            "-o", f"ConnectTimeout={self.probe_timeout}",
            alias,
            *remote,
        ]

    def _capture(self, cmd: List[str]) -> subprocess.CompletedProcess:
        logger.debug("Running %s", cmd)
        return self._run(
            cmd,
            check=False,
            text=True,
            capture_output=True,
            stdin=subprocess.DEVNULL,
            timeout=self.probe_timeout + 5,
        )

    def probe(self, alias: str) -> ProbeResult:
        try:
            proc = self._capture(self._batch_args(alias, "echo", "ok"))
        except FileNotFoundError:
            return ProbeResult(success=False, error="ssh: command not found")
        except subprocess.TimeoutExpired:
            return ProbeResult(success=False, error=f"ssh: probe to {alias} timed out")

        if proc.returncode == 0:
            return ProbeResult(success=True)
        return ProbeResult(success=False, error=(proc.stderr or "").strip())

    def query_remote_env(self, alias: str, name: str) -> Optional[str]:
        try:
            proc = self._capture(self._batch_args(alias, "printenv", name))
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("Remote env query for %s failed: %s", name, e)
            return None

        if proc.returncode != 0:
            return None
        return (proc.stdout or "").strip() or None

    def forget_host_key(self, host: str, port: int) -> None:
        known_hosts = self.ssh_dir / "known_hosts"
        if not known_hosts.exists():
            return

        entry = host if port == DEFAULT_SSH_PORT else f"[{host}]:{port}"
        proc = self._capture(["ssh-keygen", "-R", entry, "-f", str(known_hosts)])
        if proc.returncode != 0:
            logger.warning("ssh-keygen -R %s failed: %s", entry, (proc.stderr or "").strip())

    def close_control_master(self, alias: str) -> None:
        proc = self._capture(["ssh", "-O", "exit", alias])
        if proc.returncode != 0:
            # No master running is the common case
            logger.debug("No control master closed for %s: %s", alias, (proc.stderr or "").strip())

    def run(self, alias: str, command: str, tty: bool = False) -> int:
        cmd = ["ssh", "-t", alias, command] if tty else ["ssh", alias, command]
        logger.debug("Running %s", cmd)
        return self._run(cmd, check=False).returncode
