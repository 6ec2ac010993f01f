"""
Mutagen sync engine adapter

Callers address sessions by local path only. The session name derived
from the canonical path is private to this module.
"""
import hashlib
import json
import subprocess
from typing import Any, Callable, Dict, List, Optional

from ...core.constants import SESSION_LABEL, SYNC_MODE
from ...core.exceptions import SyncError
from ...core.interfaces import SyncEngine
from ...core.logging import get_logger
from ...core.paths import canonical_path
from ...domain.models import ConnectionConfig, SyncStatus
from .ignore import IgnorePatternSet
from .installer import MutagenInstaller

logger = get_logger(__name__)

_JSON_TEMPLATE = "{{json .}}"

STATUS_NOT_INSTALLED = "not-installed"
STATUS_NO_SESSION = "no-session"

_STATUS_LABELS = {
    STATUS_NOT_INSTALLED: "Sync engine not installed",
    STATUS_NO_SESSION: "No sync session",
    "disconnected": "Disconnected",
    "halted-on-root-emptied": "Halted (root emptied)",
    "halted-on-root-deletion": "Halted (root deleted)",
    "halted-on-root-type-change": "Halted (root type changed)",
    "connecting-alpha": "Connecting (local)",
    "connecting-beta": "Connecting (remote)",
    "watching": "Watching for changes",
    "scanning": "Scanning files",
    "waiting-for-rescan": "Waiting for rescan",
    "reconciling": "Reconciling changes",
    "staging-alpha": "Staging files (local)",
    "staging-beta": "Staging files (remote)",
    "transitioning": "Applying changes",
    "saving": "Saving archive",
    "paused": "Paused",
}


def format_sync_status(status: str) -> str:
    """Human-friendly label; unknown keywords pass through"""
    return _STATUS_LABELS.get(status, status)


def session_name(local_path: str) -> str:
    digest = hashlib.sha256(canonical_path(local_path).encode("utf-8")).hexdigest()
    return f"haven-{digest[:20]}"


def _problems(endpoint: Dict[str, Any]) -> List[str]:
    problems = []
    for key in ("scanProblems", "transitionProblems"):
        for problem in endpoint.get(key) or []:
            path = problem.get("path") or "."
            problems.append(f"{path}: {problem.get('error', 'unknown error')}")
    return problems


class MutagenEngine(SyncEngine):
    """SyncEngine backed by a locally installed mutagen binary"""

    def __init__(
        self,
        installer: MutagenInstaller,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """
        Args:
            installer: Provides (and lazily installs) the binary
            runner: subprocess.run compatible callable
        """
        self.installer = installer
        self._run = runner

    def _run_mutagen(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        cmd = [str(self.installer.binary_path), *args]
        logger.debug("Running %s", cmd)
        try:
            proc = self._run(cmd, check=False, text=True, capture_output=True)
        except OSError as e:
            raise SyncError(f"Could not run mutagen: {e}") from e

        if check and proc.returncode != 0:
            details = (proc.stderr or proc.stdout or "").strip()
            message = f"mutagen {' '.join(args[:2])} failed (exit {proc.returncode})"
            raise SyncError(f"{message}: {details}" if details else message)
        return proc

    def _list_session(self, name: str) -> Optional[Dict[str, Any]]:
        proc = self._run_mutagen(["sync", "list", name, "--template", _JSON_TEMPLATE], check=False)
        if proc.returncode != 0:
            return None
        try:
            sessions = json.loads(proc.stdout or "[]")
        except ValueError:
            logger.debug("Unparseable mutagen list output: %r", proc.stdout)
            return None
        if not isinstance(sessions, list) or not sessions:
            return None
        return sessions[0]

    # --------------------
    # SyncEngine
    # --------------------
    def is_installed(self) -> bool:
        return self.installer.is_installed()

    def ensure_installed(self, on_progress: Optional[Callable[[str], None]] = None):
        return self.installer.ensure_installed(on_progress)

    def start(
        self,
        local_path: str,
        alias: str,
        config: ConnectionConfig,
        on_progress: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Resume the existing session when it still points at alias:remote_path,
        otherwise (re)create it.

        Raises:
            SyncError: On install or mutagen failure
        """
        self.ensure_installed(on_progress)
        local = canonical_path(local_path)
        name = session_name(local)

        existing = self._list_session(name)
        if existing is not None:
            beta = existing.get("beta") or {}
            if beta.get("host") == alias and beta.get("path") == config.remote_path:
                if on_progress:
                    on_progress("Resuming sync...")
                self._run_mutagen(["sync", "resume", name])
                return
            logger.info("Recreating sync session %s for new target", name)
            self._run_mutagen(["sync", "terminate", name], check=False)

        if on_progress:
            on_progress("Creating sync session...")
        args = [
            "sync", "create",
            "--name", name,
            "--mode", SYNC_MODE,
            "--label", SESSION_LABEL,
            *IgnorePatternSet.for_project(local).to_engine_args(),
            local,
            f"{alias}:{config.remote_path}",
        ]
        self._run_mutagen(args)

    def stop(self, local_path: str) -> None:
        if not self.is_installed():
            raise SyncError("mutagen is not installed")
        self._run_mutagen(["sync", "terminate", session_name(local_path)])

    def flush(self, local_path: str) -> None:
        if not self.is_installed():
            raise SyncError("mutagen is not installed")
        self._run_mutagen(["sync", "flush", session_name(local_path)])

    def status(self, local_path: str) -> SyncStatus:
        if not self.is_installed():
            return SyncStatus(status=STATUS_NOT_INSTALLED)

        session = self._list_session(session_name(local_path))
        if session is None:
            return SyncStatus(status=STATUS_NO_SESSION)

        status = "paused" if session.get("paused") else session.get("status") or "unknown"
        conflicts = [
            conflict.get("root") or "."
            for conflict in session.get("conflicts") or []
        ]
        errors = []
        if session.get("lastError"):
            errors.append(session["lastError"])
        errors += _problems(session.get("alpha") or {})
        errors += _problems(session.get("beta") or {})

        return SyncStatus(status=status, conflicts=conflicts, errors=errors)
