"""
Managed SSH config fragment

Host blocks live in ~/.ssh/config.d/haven.conf, never in the user's main
config. The main config only has to Include the fragment; that is checked
and reported, never edited.
"""
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import paramiko

from ...core.constants import (
    HOST_HARDENING_OPTIONS,
    INCLUDE_DIRECTIVE,
    SSH_CONFIG_DIR_MODE,
    SSH_CONFIG_DIR_NAME,
    SSH_CONFIG_FRAGMENT_NAME,
    SSH_CONFIG_MODE,
)
from ...core.logging import get_logger
from .identity import SshIdentity

logger = get_logger(__name__)

_BLOCK_START_RE = re.compile(r"^\s*(Host|Match)\s", re.IGNORECASE)
_INCLUDE_RE = re.compile(r"^\s*Include\s+.*config\.d/\*", re.MULTILINE | re.IGNORECASE)


class SshHostConfig:
    """Idempotent management of Host blocks in the managed fragment"""

    def __init__(self, ssh_dir: Path, identity: SshIdentity):
        """
        Args:
            ssh_dir: User ssh directory (normally ~/.ssh)
            identity: Key discovery used for IdentityFile directives
        """
        self.ssh_dir = Path(ssh_dir).expanduser()
        self.identity = identity

    @property
    def config_path(self) -> Path:
        return self.ssh_dir / SSH_CONFIG_DIR_NAME / SSH_CONFIG_FRAGMENT_NAME

    @property
    def main_config_path(self) -> Path:
        return self.ssh_dir / "config"

    # --------------------
    # Block rendering
    # --------------------
    def render_block(self, alias: str, host: str, port: int, user: str) -> str:
        """Host block for alias with one IdentityFile per known key"""
        lines = [
            f"Host {alias}",
            f"  HostName {host}",
            f"  Port {port}",
            f"  User {user}",
        ]
        lines += [f"  IdentityFile {path}" for path in self.identity.key_paths()]
        lines += [f"  {option} {value}" for option, value in HOST_HARDENING_OPTIONS]
        return "\n".join(lines) + "\n"

    @staticmethod
    def strip_block(content: str, alias: str) -> str:
        """
        Remove the block whose header is exactly ``Host <alias>``.

        The block runs until the next Host/Match line or end of file;
        everything else is preserved verbatim.
        """
        header = re.compile(rf"^Host[ \t]+{re.escape(alias)}[ \t]*$")
        kept: List[str] = []
        skip = False

        for line in content.split("\n"):
            if header.match(line):
                skip = True
                continue
            if skip:
                if _BLOCK_START_RE.match(line):
                    skip = False
                else:
                    continue
            kept.append(line)

        return "\n".join(kept)

    def _read(self) -> str:
        try:
            return self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def _write(self, content: str) -> None:
        # Created owner-only; chmod also tightens a pre-existing file
        fd = os.open(self.config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SSH_CONFIG_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        self.config_path.chmod(SSH_CONFIG_MODE)

    # --------------------
    # Upsert / remove
    # --------------------
    def write_alias(self, alias: str, host: str, port: int, user: str) -> Path:
        """
        Insert or replace the Host block for alias.

        Returns:
            Path of the managed fragment
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True, mode=SSH_CONFIG_DIR_MODE)

        remaining = self.strip_block(self._read(), alias).strip()
        block = self.render_block(alias, host, port, user)
        content = (remaining + "\n\n" + block).strip() + "\n"

        self._write(content)
        logger.debug("Wrote Host %s to %s", alias, self.config_path)
        return self.config_path

    def remove_alias(self, alias: str) -> None:
        """Remove the Host block for alias; deletes the fragment if it empties"""
        if not self.config_path.exists():
            return

        original = self._read()
        remaining = self.strip_block(original, alias).strip()
        if remaining:
            if remaining + "\n" != original:
                self._write(remaining + "\n")
        else:
            self.config_path.unlink()
        logger.debug("Removed Host %s from %s", alias, self.config_path)

    # --------------------
    # Include check
    # --------------------
    def has_include(self) -> bool:
        """Whether the main ssh config includes the config.d fragments"""
        try:
            content = self.main_config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return False
        return bool(_INCLUDE_RE.search(content))

    @staticmethod
    def include_directive() -> str:
        return INCLUDE_DIRECTIVE

    # --------------------
    # Lookup
    # --------------------
    def lookup(self, alias: str) -> Optional[Dict[str, Any]]:
        """
        Effective settings for alias as the managed fragment defines them.

        Returns:
            Dictionary containing host, port, user, identity_files, or None
            if the fragment has no block for alias
        """
        if not self.config_path.exists():
            return None

        ssh_config = paramiko.SSHConfig.from_path(str(self.config_path))
        if alias not in ssh_config.get_hostnames():
            return None

        entry = ssh_config.lookup(alias)
        return {
            "host": entry.get("hostname", alias),
            "port": int(entry.get("port", 22)),
            "user": entry.get("user"),
            "identity_files": list(entry.get("identityfile", [])),
        }
