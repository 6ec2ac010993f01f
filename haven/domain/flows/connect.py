"""
Connect flow

resolving-config -> ensuring-identity -> writing-host-config -> probing
-> (auth-remediation) -> starting-sync -> persisting -> done, with failed
reachable from every step. Host config and key changes are left in place
when a later step fails; both are idempotent.
"""
import os
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from ...core.constants import IDLE_TIMEOUT_ENV
from ...core.duration import format_duration, parse_duration
from ...core.exceptions import AuthError, HavenError, HostKeyError, InputError
from ...core.interfaces import PromptProvider, SshClient, SyncEngine
from ...core.logging import get_logger
from ...core.paths import base_name, canonical_path, contract_path, is_directory
from ...core.settings import Settings
from ...infrastructure.ssh.host_config import SshHostConfig
from ...infrastructure.ssh.identity import SshIdentity
from ...infrastructure.state.connection_store import ConnectionStore
from ...infrastructure.state.session_store import SessionStore
from ..hostspec import derive_alias, parse_host_spec, workspace_url
from ..models import ConnectionConfig, ProbeResult, SessionState, SshKeyInfo, now_ms
from .remediation import RemediationAction, decide_remediation, remediation_options

logger = get_logger(__name__)

AGENT_COMMANDS = ['eval "$(ssh-agent -s)"', "ssh-add"]
INVALID_TARGET = "Invalid connection format. Expected: host, user@host, or user@host:port"


class ConnectState(str, Enum):
    RESOLVING_CONFIG = "resolving-config"
    ENSURING_IDENTITY = "ensuring-identity"
    WRITING_HOST_CONFIG = "writing-host-config"
    PROBING = "probing"
    AUTH_REMEDIATION = "auth-remediation"
    STARTING_SYNC = "starting-sync"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ConnectRequest:
    """
    Attributes:
        path: Explicit local directory
        target: Host spec overriding any stored target
        idle_timeout: Idle timeout in ms; None defers to the remote env
        reset_host_key: Forget the cached host key before probing
        cwd: Directory used when path is omitted
    """
    path: Optional[str] = None
    target: Optional[str] = None
    idle_timeout: Optional[int] = None
    reset_host_key: bool = False
    cwd: str = field(default_factory=os.getcwd)


@dataclass
class ConnectResult:
    local_path: str
    config: ConnectionConfig
    session: SessionState
    generated_key: bool = False
    retried: bool = False
    states: List[ConnectState] = field(default_factory=list)


class ConnectFlow:
    """
    Connect orchestration over injectable collaborators.

    All user interaction goes through the PromptProvider; SSH and sync
    engine access go through their capability interfaces.
    """

    def __init__(
        self,
        settings: Settings,
        connections: ConnectionStore,
        sessions: SessionStore,
        identity: SshIdentity,
        host_config: SshHostConfig,
        ssh: SshClient,
        sync_engine: SyncEngine,
        prompts: PromptProvider,
        clock: Callable[[], int] = now_ms,
    ):
        self.settings = settings
        self.connections = connections
        self.sessions = sessions
        self.identity = identity
        self.host_config = host_config
        self.ssh = ssh
        self.sync_engine = sync_engine
        self.prompts = prompts
        self.clock = clock

    def run(self, request: ConnectRequest) -> ConnectResult:
        """
        Execute the flow.

        Raises:
            InputError, IdentityError, AuthError, HostKeyError, SyncError
        """
        states: List[ConnectState] = []
        try:
            return self._run(request, states)
        except HavenError:
            self._enter(states, ConnectState.FAILED)
            raise

    def _enter(self, states: List[ConnectState], state: ConnectState) -> None:
        logger.debug("connect: %s", state.value)
        states.append(state)

    def _run(self, request: ConnectRequest, states: List[ConnectState]) -> ConnectResult:
        self._enter(states, ConnectState.RESOLVING_CONFIG)
        local_path, config = self.resolve_config(request)
        alias = config.ssh_alias
        hint_url = workspace_url(request.target or config.host, self.settings.managed_domain)

        self._enter(states, ConnectState.ENSURING_IDENTITY)
        generated = self._ensure_identity(hint_url)

        self._enter(states, ConnectState.WRITING_HOST_CONFIG)
        if request.reset_host_key:
            self.prompts.info("Removing old host key...")
            self.ssh.forget_host_key(config.host, config.port)
            self.prompts.success("Host key removed")
        self.host_config.write_alias(alias, config.host, config.port, config.user)

        self._enter(states, ConnectState.PROBING)
        self.prompts.info("Testing connection...")
        probe = self.ssh.probe(alias)
        retried = False
        if not probe.success:
            self._enter(states, ConnectState.AUTH_REMEDIATION)
            self._remediate(config, probe, hint_url)
            retried = True
        self.prompts.success("SSH connection successful")

        idle_timeout = self._resolve_idle_timeout(request, alias)

        self._enter(states, ConnectState.STARTING_SYNC)
        self.prompts.info("Starting sync...")
        self.sync_engine.start(local_path, alias, config, on_progress=self.prompts.info)
        self.prompts.success("Sync started")

        self._enter(states, ConnectState.PERSISTING)
        now = self.clock()
        config.last_connected = now
        self.connections.save(local_path, config)
        session = SessionState(connected=True, start_time=now, idle_timeout=idle_timeout)
        self.sessions.save(local_path, session)

        self._enter(states, ConnectState.DONE)
        self.prompts.success(f"Connected to {config.host}:{config.port}")
        self.prompts.info(f"Local:  {contract_path(local_path)}")
        self.prompts.info(f"Remote: {config.remote_path}")
        if idle_timeout:
            self.prompts.info(f"Idle timeout: {format_duration(idle_timeout)}")

        return ConnectResult(
            local_path=local_path,
            config=config,
            session=session,
            generated_key=generated,
            retried=retried,
            states=states,
        )

    # ============================================================
    # resolving-config
    # ============================================================

    def default_remote_path(self, local_path: str) -> str:
        return posixpath.join(self.settings.remote_root, base_name(local_path))

    def config_from_target(self, target: str, local_path: str) -> ConnectionConfig:
        """
        Raises:
            InputError: If target does not parse
        """
        spec = parse_host_spec(target, self.settings.default_user, self.settings.managed_domain)
        if spec is None:
            raise InputError(INVALID_TARGET)
        return ConnectionConfig(
            host=spec.host,
            port=spec.port,
            user=spec.user,
            remote_path=self.default_remote_path(local_path),
        )

    def _prompt_for_config(self, local_path: str) -> ConnectionConfig:
        self.prompts.info("No remote target configured for this directory.")
        answer = self.prompts.prompt("SSH connection (host or user@host[:port])")
        config = self.config_from_target(answer.strip(), local_path)
        config.remote_path = self.prompts.prompt(
            "Remote path", default=config.remote_path
        ).strip() or config.remote_path
        return config

    def resolve_config(self, request: ConnectRequest) -> Tuple[str, ConnectionConfig]:
        """
        Local directory and connection for this request.

        Priority: explicit path's stored config, target string, ancestor
        search, interactive prompt. A target always overrides a stored
        config.
        """
        config: Optional[ConnectionConfig] = None

        if request.path:
            local_path = canonical_path(request.path)
            if not is_directory(local_path):
                raise InputError(f"Path does not exist or is not a directory: {request.path}")
            config = self.connections.get(local_path)
        else:
            found = self.connections.find_ancestor(request.cwd)
            if found:
                local_path, config = found
            elif request.target:
                local_path = canonical_path(request.cwd)
            else:
                raise InputError(
                    "No path specified and no parent directory is connected.",
                    hints=["haven connect <path>", "haven connect . --target <host>"],
                )

        if request.target:
            config = self.config_from_target(request.target, local_path)
        if config is None:
            config = self._prompt_for_config(local_path)

        config.validate()
        config.ssh_alias = derive_alias(config.host, config.port)
        return local_path, config

    # ============================================================
    # ensuring-identity
    # ============================================================

    def _key_instructions(self, hint_url: Optional[str]) -> str:
        if hint_url:
            return f"Add key: {hint_url} -> Remote Access"
        return "Add key in your workspace (open in browser) -> Remote Access"

    def _show_keys(self, title: str, keys: Sequence[str], hint_url: Optional[str]) -> None:
        lines = []
        for key in keys:
            fingerprint = self.identity.fingerprint(key)
            lines.append(key)
            if fingerprint:
                lines.append(f"({fingerprint})")
            lines.append("")
        self.prompts.panel("\n".join(lines).rstrip(), title=title)
        self.prompts.info(self._key_instructions(hint_url))

    def _wait_for_user(self) -> None:
        self.prompts.prompt("Press Enter when ready...", default="")

    def _ensure_identity(self, hint_url: Optional[str]) -> bool:
        result = self.identity.ensure()
        if result.generated:
            key: SshKeyInfo = result.keys[0]
            self.prompts.info("No SSH keys found. Generated a new key for Haven.")
            self.prompts.success(f"Created {contract_path(key.private_key_path)}")
            self._show_keys("Copy this public key", [key.public_key], hint_url)
            self._wait_for_user()

        if not self.host_config.has_include():
            self.prompts.warning("SSH config may not include Haven configuration.")
            self.prompts.info("Add this line to the TOP of your ~/.ssh/config:")
            self.prompts.info(f"   {self.host_config.include_directive()}")
        return result.generated

    # ============================================================
    # auth-remediation
    # ============================================================

    def _remediate(self, config: ConnectionConfig, probe: ProbeResult, hint_url: Optional[str]) -> None:
        """Returns only when a retried probe succeeds"""
        self.prompts.error(f"Cannot connect to {config.host}:{config.port}")
        if probe.error:
            self.prompts.info(probe.error)
        logger.info("Probe of %s failed: %s", config.ssh_alias, probe.error)

        if probe.host_key_mismatch:
            raise HostKeyError(
                f"Host key verification failed for {config.host}:{config.port}",
                hints=[
                    "The host key may have changed. If you trust the new key, run:",
                    "haven connect --reset-host-key",
                ],
            )

        if self.identity.has_managed_key():
            managed = self.identity.managed_public_key()
            self._show_keys("Your Haven public key (copy this)", [managed], hint_url)
            raise AuthError(
                "SSH authentication failed",
                hints=[
                    "Possible causes: workspace stopped, network blocking the port, key not added.",
                    "If using passphrase-protected keys, ensure ssh-agent is running:",
                    " && ".join(AGENT_COMMANDS),
                ],
            )

        existing = self.identity.public_keys()
        decision = decide_remediation(self._ask_remediation(bool(existing)), bool(existing))
        logger.debug("Remediation decision: %s", decision)

        if decision.action == RemediationAction.GENERATE_MANAGED_KEY:
            key = self.identity.generate_managed()
            self.prompts.success(f"Created {contract_path(key.private_key_path)}")
            self._show_keys("Copy this public key", [key.public_key], hint_url)
            self._wait_for_user()
        elif decision.action == RemediationAction.SHOW_EXISTING_KEYS:
            self._show_keys("Your existing public key(s)", existing, hint_url)
            self._wait_for_user()

        if not decision.retry:
            raise AuthError(
                "SSH authentication failed",
                hints=["Add your key to ssh-agent:", *AGENT_COMMANDS, "Then run 'haven connect' again."],
            )

        # New keys need IdentityFile lines before the retry
        self.host_config.write_alias(config.ssh_alias, config.host, config.port, config.user)
        self.prompts.info("Retrying connection...")
        retry = self.ssh.probe(config.ssh_alias)
        if not retry.success:
            raise AuthError(
                "Connection still failed",
                hints=[
                    retry.error or "No diagnostic from ssh",
                    self._key_instructions(hint_url),
                    "Then run 'haven connect' again.",
                ],
            )

    def _ask_remediation(self, has_existing_keys: bool) -> str:
        self.prompts.warning("SSH authentication failed. This usually means:")
        self.prompts.info("  - Your key isn't authorized on the workspace, OR")
        self.prompts.info("  - Your key is passphrase-protected without ssh-agent")
        for choice, _action, description in remediation_options(has_existing_keys):
            self.prompts.info(f"  [{choice}] {description}")
        return self.prompts.prompt("Choice", default="1")

    # ============================================================
    # idle timeout
    # ============================================================

    def _resolve_idle_timeout(self, request: ConnectRequest, alias: str) -> Optional[int]:
        if request.idle_timeout is not None:
            return request.idle_timeout

        remote_value = self.ssh.query_remote_env(alias, IDLE_TIMEOUT_ENV)
        if not remote_value:
            return None
        parsed = parse_duration(remote_value)
        if parsed is None:
            logger.warning("Ignoring invalid remote %s=%r", IDLE_TIMEOUT_ENV, remote_value)
        return parsed
