"""
SSH key discovery and managed key generation
"""
import base64
import hashlib
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import paramiko

from ...core.constants import (
    DEFAULT_KEY_NAMES,
    MANAGED_KEY_COMMENT,
    MANAGED_KEY_NAME,
    PRIVATE_KEY_MODE,
    PUBLIC_KEY_MODE,
    SSH_CONFIG_DIR_MODE,
)
from ...core.exceptions import IdentityError
from ...core.logging import get_logger
from ...domain.models import SshKeyInfo

logger = get_logger(__name__)


@dataclass
class EnsureResult:
    """Keys available after ensure(); generated is True for a fresh managed key"""
    keys: List[SshKeyInfo]
    generated: bool


class SshIdentity:
    """
    Read-only view over the SSH keys in an ssh directory, plus generation
    of the passphrase-less managed key.
    """

    def __init__(
        self,
        ssh_dir: Path,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """
        Args:
            ssh_dir: Directory holding key pairs (normally ~/.ssh)
            runner: subprocess.run compatible callable used for ssh-keygen
        """
        self.ssh_dir = Path(ssh_dir).expanduser()
        self._run = runner

    @property
    def managed_key_path(self) -> Path:
        return self.ssh_dir / MANAGED_KEY_NAME

    def _load_pair(self, key_name: str) -> Optional[SshKeyInfo]:
        private_key = self.ssh_dir / key_name
        public_key = self.ssh_dir / f"{key_name}.pub"
        if not (private_key.is_file() and public_key.is_file()):
            return None
        try:
            material = public_key.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable public key %s: %s", public_key, e)
            return None
        if not material:
            return None
        return SshKeyInfo(
            private_key_path=str(private_key),
            public_key_path=str(public_key),
            public_key=material,
        )

    def find_existing(self) -> List[SshKeyInfo]:
        """
        Scan conventional key names, then the managed one.

        Returns:
            Every pair with both files present and a non-empty public key,
            in scan order
        """
        keys = []
        for key_name in (*DEFAULT_KEY_NAMES, MANAGED_KEY_NAME):
            info = self._load_pair(key_name)
            if info is not None:
                keys.append(info)
        return keys

    def key_paths(self) -> List[str]:
        return [key.private_key_path for key in self.find_existing()]

    def public_keys(self) -> List[str]:
        return [key.public_key for key in self.find_existing()]

    def has_managed_key(self) -> bool:
        return self._load_pair(MANAGED_KEY_NAME) is not None

    def managed_public_key(self) -> Optional[str]:
        info = self._load_pair(MANAGED_KEY_NAME)
        return info.public_key if info else None

    def generate_managed(self) -> SshKeyInfo:
        """
        Generate the managed Ed25519 key pair with no passphrase.

        Raises:
            IdentityError: If a managed private key without its public half
                is in the way, or ssh-keygen is missing or exits non-zero
        """
        self.ssh_dir.mkdir(parents=True, exist_ok=True, mode=SSH_CONFIG_DIR_MODE)
        private_key = self.managed_key_path
        public_key = Path(f"{private_key}.pub")

        # ssh-keygen would stop at its overwrite prompt
        if private_key.exists() and not public_key.is_file():
            raise IdentityError(
                f"Found {private_key} without its public key",
                hints=[
                    f"ssh-keygen -y -f {private_key} > {public_key}",
                    f"or remove {private_key} and run 'haven connect' again",
                ],
            )

        cmd = [
            "ssh-keygen",
            "-t", "ed25519",
            "-f", str(private_key),
            "-N", "",
            "-C", MANAGED_KEY_COMMENT,
        ]
        logger.debug("Running %s", cmd)
        try:
            proc = self._run(
                cmd,
                check=False,
                text=True,
                capture_output=True,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise IdentityError(
                "ssh-keygen not found",
                hints=["Install the OpenSSH client tools and run 'haven connect' again."],
            ) from e

        if proc.returncode != 0:
            details = (proc.stderr or proc.stdout or "").strip()
            raise IdentityError(f"ssh-keygen failed: {details}")

        private_key.chmod(PRIVATE_KEY_MODE)
        public_key.chmod(PUBLIC_KEY_MODE)

        info = self._load_pair(MANAGED_KEY_NAME)
        if info is None:
            raise IdentityError(f"ssh-keygen did not produce {public_key}")
        return info

    def ensure(self) -> EnsureResult:
        """Existing keys if there are any, otherwise a fresh managed key"""
        existing = self.find_existing()
        if existing:
            return EnsureResult(keys=existing, generated=False)
        return EnsureResult(keys=[self.generate_managed()], generated=True)

    @staticmethod
    def fingerprint(public_key: str) -> Optional[str]:
        """
        SHA256 fingerprint in ssh-keygen -l notation.

        Returns:
            "SHA256:<base64>" or None when the material does not parse
        """
        try:
            blob = paramiko.PublicBlob.from_string(public_key)
        except (ValueError, TypeError, IndexError, paramiko.SSHException):
            return None
        digest = hashlib.sha256(blob.key_blob).digest()
        return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")
